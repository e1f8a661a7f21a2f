# Copyright 2022-present Kensho Technologies, LLC.
import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from ..config import ElasticSearchConnection
from ..exceptions import (
    ElasticSearchError,
    InvalidQueryArgumentError,
    MissingAggregationError,
    ResultWindowError,
)
from .typedefs import (
    EnumerationParams,
    EnumerationResponse,
    EnumerationValue,
    SearchParams,
    SearchResponse,
)
from .utils import extract_page


logger = logging.getLogger(__name__)

# Only the returned documents and the total hit count are kept in search responses.
SEARCH_FILTER_PATH = "hits.hits._source,hits.total"

# Maximum number of distinct values fetched by an enumeration query, before paging.
MAX_ENUMERATION_BUCKETS = 10000

RESULT_WINDOW_TOO_LARGE = "Result window is too large"

_ENUMERATION_ORDER_KEYS = {"value": "_key", "count": "_count"}


def _get_failure_reason(response: requests.Response) -> str:
    """Return the root cause reported by Elasticsearch for a failed request."""
    try:
        return response.json()["error"]["root_cause"][0]["reason"] or ""
    except (ValueError, KeyError, IndexError, TypeError):
        return response.text


def _get_total_hits(result: Mapping[str, Any]) -> int:
    return result.get("hits", {}).get("total", {}).get("value", 0)


class ElasticSearchClient:
    """Client running searches and enumeration aggregations over a single index."""

    def __init__(
        self, connection: ElasticSearchConnection, session: Optional[requests.Session] = None
    ) -> None:
        self.connection = connection
        if session is None:
            session = requests.Session()
        if connection.username is not None:
            session.auth = (connection.username, connection.password or "")
        self.session = session

    @property
    def search_url(self) -> str:
        return "{}/{}/_search".format(self.connection.url.rstrip("/"), self.connection.index)

    def search(self, params: SearchParams) -> SearchResponse:
        """Return one page of the documents matching the filter, along with the total count."""
        body: Dict[str, Any] = {}
        if params.source_fields is not None:
            body["_source"] = params.source_fields

        sort = {}
        if params.order_by is not None and params.order_how is not None:
            sort[params.order_by] = params.order_how.lower()
        body["sort"] = [sort]

        if params.offset is not None:
            body["from"] = params.offset
        if params.limit is not None:
            body["size"] = params.limit

        if params.filter is not None:
            body["query"] = {"bool": {"filter": params.filter}}

        result = self.run_query(body, {"filter_path": SEARCH_FILTER_PATH})

        # Elasticsearch omits hits.hits entirely when filter_path matches no documents.
        hits = result.get("hits", {}).get("hits", [])
        root_key = params.root_field.lower()
        return SearchResponse(
            data=[hit.get("_source", {}).get(root_key) for hit in hits],
            total=_get_total_hits(result),
        )

    def enumeration_query(self, params: EnumerationParams) -> EnumerationResponse:
        """Return one page of the distinct values of a field, and the number of each.

        Values are aggregated by Elasticsearch and paged locally, so the total is the number
        of distinct values across all pages.
        """
        order_key = _ENUMERATION_ORDER_KEYS.get(params.order_by)
        if order_key is None:
            raise InvalidQueryArgumentError(
                "order_by must be one of {} (was {})".format(
                    sorted(_ENUMERATION_ORDER_KEYS), params.order_by
                )
            )

        terms: Dict[str, Any] = {
            "field": params.field,
            "size": MAX_ENUMERATION_BUCKETS,
            "order": [{order_key: params.order_how.lower()}],
            "show_term_doc_count_error": True,
        }

        search = (params.field_filter or {}).get("search") or {}
        if search.get("eq") is not None:
            terms["include"] = [search["eq"]]

        body: Dict[str, Any] = {
            "_source": [],
            "size": 0,
            "aggs": {params.field: {"terms": terms}},
        }
        if params.root_filter:
            body["query"] = {"bool": {"filter": params.root_filter}}

        result = self.run_query(body)
        try:
            buckets: List[Dict[str, Any]] = result["aggregations"][params.field]["buckets"]
        except (KeyError, TypeError) as e:
            raise MissingAggregationError(
                "Elasticsearch response has no aggregation for field {}".format(params.field)
            ) from e

        page = extract_page(buckets, params.limit, params.offset)
        return EnumerationResponse(
            field=params.field,
            data=[EnumerationValue(bucket["key"], bucket["doc_count"]) for bucket in page],
            total=len(buckets),
        )

    def run_query(
        self, body: Dict[str, Any], query_params: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Post the search body to the index, and return the decoded response.

        If the requested page lies beyond the result window of the index, the query is run
        again to count the matching documents. An empty count response is returned when the
        page would have been empty anyway, and ResultWindowError is raised otherwise.
        """
        logger.debug("Executing Elasticsearch query: %s", body)
        try:
            response = self.session.post(
                self.search_url, params=query_params, json=body, timeout=self.connection.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            reason = _get_failure_reason(e.response)
            logger.error("Elasticsearch query failed: %s", reason)
            if reason.startswith(RESULT_WINDOW_TOO_LARGE):
                return self._count_or_raise(body, query_params, reason, e)
            raise ElasticSearchError(
                "Elasticsearch query on index {} failed: {}".format(self.connection.index, reason)
            ) from e
        except requests.RequestException as e:
            logger.error("Elasticsearch query failed: %s", e)
            raise ElasticSearchError(
                "Elasticsearch query on index {} failed: {}".format(self.connection.index, e)
            ) from e

        result = response.json()
        logger.debug("Elasticsearch query finished: %s", result)
        return result

    def _count_or_raise(
        self,
        body: Dict[str, Any],
        query_params: Optional[Dict[str, str]],
        reason: str,
        error: requests.HTTPError,
    ) -> Dict[str, Any]:
        requested_offset = body.get("from", 0)
        count_body = dict(body)
        count_body["from"] = 0
        count_body["size"] = 0

        count_result = self.run_query(count_body, query_params)
        if _get_total_hits(count_result) >= requested_offset:
            raise ResultWindowError(reason) from error

        return count_result
