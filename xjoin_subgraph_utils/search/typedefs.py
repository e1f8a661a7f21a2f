# Copyright 2022-present Kensho Technologies, LLC.
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class SearchParams:
    """Parameters of a paged search over the documents of one entity."""

    root_field: str  # Name of the root field of the Avro schema, e.g. "host".
    source_fields: Optional[List[str]] = None  # Document fields to return; None returns all.
    filter: Optional[List[Dict[str, Any]]] = None  # Elasticsearch filter clauses.
    order_by: Optional[str] = None
    order_how: Optional[str] = None  # "ASC" or "DESC", in any case.
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class SearchResponse:
    data: List[Any]  # The root field of each matching document.
    total: int  # Number of matching documents, regardless of paging.


@dataclass(frozen=True)
class EnumerationParams:
    """Parameters of a query for the distinct values of a field, and their counts."""

    field: str  # Dot-separated document path, e.g. "host.display_name".
    limit: int
    offset: int
    order_by: str  # "value" or "count".
    order_how: str  # "ASC" or "DESC", in any case.
    field_filter: Optional[Mapping[str, Any]] = None  # Value of an EnumerationFilter argument.
    root_filter: Optional[List[Dict[str, Any]]] = None  # Restricts the documents considered.


@dataclass(frozen=True)
class EnumerationValue:
    value: Any
    count: int


@dataclass(frozen=True)
class EnumerationResponse:
    field: str
    data: List[EnumerationValue]
    total: int  # Number of distinct values, regardless of paging.
