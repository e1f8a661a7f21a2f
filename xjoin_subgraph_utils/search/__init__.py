# Copyright 2022-present Kensho Technologies, LLC.
from .client import ElasticSearchClient  # noqa
from .typedefs import (  # noqa
    EnumerationParams,
    EnumerationResponse,
    EnumerationValue,
    SearchParams,
    SearchResponse,
)
from .utils import check_limit, check_offset, default_value, extract_page  # noqa
