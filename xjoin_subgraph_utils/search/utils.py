# Copyright 2022-present Kensho Technologies, LLC.
from typing import List, Optional, Sequence, TypeVar

from ..exceptions import InvalidQueryArgumentError


MAX_LIMIT = 100

T = TypeVar("T")


def check_min(name: str, minimum: int, value: Optional[int]) -> None:
    """Raise InvalidQueryArgumentError if the value is set and less than the minimum."""
    if value is not None and value < minimum:
        raise InvalidQueryArgumentError(
            "{} must be {} or greater (was {})".format(name, minimum, value)
        )


def check_max(name: str, maximum: int, value: Optional[int]) -> None:
    """Raise InvalidQueryArgumentError if the value is set and greater than the maximum."""
    if value is not None and value > maximum:
        raise InvalidQueryArgumentError(
            "{} must be {} or less (was {})".format(name, maximum, value)
        )


def check_limit(limit: Optional[int]) -> None:
    check_min("limit", 0, limit)
    check_max("limit", MAX_LIMIT, limit)


def check_offset(offset: Optional[int]) -> None:
    check_min("offset", 0, offset)


def default_value(value: Optional[T], default: T) -> T:
    """Return the value, or the default if the value is None."""
    if value is None:
        return default
    return value


def extract_page(items: Sequence[T], limit: int, offset: int) -> List[T]:
    """Return the items on the page of the given size, starting at the given offset."""
    return list(items[offset : offset + limit])
