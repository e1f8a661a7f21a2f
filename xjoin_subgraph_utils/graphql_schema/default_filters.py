# Copyright 2022-present Kensho Technologies, LLC.
"""Filters declared in every generated schema, and how each one becomes an Elasticsearch clause.

Every filter builder has the same signature:
    filter_key: the name of the filtered field, e.g. "display_name"
    filter_value: the value passed for that field in the GraphQL query, e.g. {"eq": "foo"}
    root: dot-separated path of the object holding the field, e.g. "host.canonical_facts"

and returns a single Elasticsearch query clause on the field "<root, lowercased>.<filter_key>".
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping

from ciso8601 import parse_datetime  # pylint: disable=no-name-in-module
import funcy

from ..exceptions import InvalidFilterValueError, MissingFilterClauseError, SchemaLookupError
from .definitions import GraphQLInput, GraphQLInputField
from .types import (
    ENUMERATION_FILTER,
    FILTER_BOOLEAN,
    FILTER_INT,
    FILTER_STRING,
    FILTER_STRING_ARRAY,
    FILTER_TIMESTAMP,
    GRAPHQL_BOOLEAN,
    GRAPHQL_INT,
    GRAPHQL_STRING,
    GRAPHQL_STRING_ARRAY,
)


FilterBuilder = Callable[[str, Mapping[str, Any], str], Dict[str, Any]]

RANGE_BOUNDS = ("lt", "lte", "gt", "gte")


@dataclass(frozen=True)
class DefaultFilter:
    """A built-in filter: its input declaration, and the builder of its Elasticsearch clause."""

    name: str
    input: GraphQLInput
    build_es_filter: FilterBuilder


def _field_path(filter_key: str, root: str) -> str:
    return "{}.{}".format(root.lower(), filter_key)


def _ensure_mapping(filter_key: str, filter_value: Any) -> None:
    if not isinstance(filter_value, Mapping):
        raise InvalidFilterValueError(
            "Expected the filter on {} to be an object, but got {!r}.".format(
                filter_key, filter_value
            )
        )


def range_filter(filter_key: str, filter_value: Mapping[str, Any], root: str) -> Dict[str, Any]:
    """Return a term clause if the filter has an "eq" bound, and a range clause otherwise."""
    _ensure_mapping(filter_key, filter_value)
    path = _field_path(filter_key, root)

    if filter_value.get("eq") is not None:
        return {"term": {path: filter_value["eq"]}}

    bounds = {
        bound: filter_value[bound] for bound in RANGE_BOUNDS if filter_value.get(bound) is not None
    }
    return {"range": {path: bounds}}


def int_filter(filter_key: str, filter_value: Mapping[str, Any], root: str) -> Dict[str, Any]:
    """Build a range clause on an integer field, checking that every bound is an integer."""
    _ensure_mapping(filter_key, filter_value)
    for bound in RANGE_BOUNDS:
        value = filter_value.get(bound)
        # bool is a subclass of int, but is not a valid bound.
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise InvalidFilterValueError(
                "Expected the {} bound of the filter on {} to be an integer, but got {!r}.".format(
                    bound, filter_key, value
                )
            )
    return range_filter(filter_key, filter_value, root)


def timestamp_filter(
    filter_key: str, filter_value: Mapping[str, Any], root: str
) -> Dict[str, Any]:
    """Build a range clause on a timestamp field, checking that every bound is ISO-8601."""
    _ensure_mapping(filter_key, filter_value)
    for bound in RANGE_BOUNDS + ("eq",):
        value = filter_value.get(bound)
        if value is None:
            continue
        try:
            parse_datetime(value)
        except (TypeError, ValueError) as e:
            raise InvalidFilterValueError(
                "Expected the {} bound of the filter on {} to be an ISO-8601 timestamp, "
                "but got {!r}.".format(bound, filter_key, value)
            ) from e
    return range_filter(filter_key, filter_value, root)


def string_filter(filter_key: str, filter_value: Mapping[str, Any], root: str) -> Dict[str, Any]:
    _ensure_mapping(filter_key, filter_value)
    if filter_value.get("eq") is None:
        raise MissingFilterClauseError(
            "string filter must contain an eq clause: {}".format(filter_key)
        )
    return {"term": {_field_path(filter_key, root): filter_value["eq"]}}


def boolean_filter(filter_key: str, filter_value: Mapping[str, Any], root: str) -> Dict[str, Any]:
    _ensure_mapping(filter_key, filter_value)
    if filter_value.get("is") is None:
        raise MissingFilterClauseError(
            "boolean filter must contain an is clause: {}".format(filter_key)
        )
    return {"term": {_field_path(filter_key, root): filter_value["is"]}}


def string_array_filter(
    filter_key: str, filter_value: Mapping[str, Any], root: str
) -> Dict[str, Any]:
    """Match documents containing all of (contains_all) or any of (contains_any) the strings."""
    _ensure_mapping(filter_key, filter_value)
    path = _field_path(filter_key, root)

    if filter_value.get("contains_all") is not None:
        return {
            "terms_set": {
                path: {
                    "terms": filter_value["contains_all"],
                    "minimum_should_match_script": {"source": "params.num_terms"},
                }
            }
        }
    if filter_value.get("contains_any") is not None:
        return {"terms": {path: filter_value["contains_any"]}}

    raise MissingFilterClauseError(
        "string array filter must contain one of [contains_all, contains_any]: {}".format(
            filter_key
        )
    )


def enumeration_filter(
    filter_key: str, filter_value: Mapping[str, Any], root: str
) -> Dict[str, Any]:
    """Return an empty clause: enumeration filters are applied to the aggregation itself."""
    return {}


def _make_input(name: str, *fields: GraphQLInputField) -> GraphQLInput:
    return GraphQLInput(name, list(fields))


class DefaultFilters:
    """Catalog of the built-in filters, in the order their inputs are declared in the schema."""

    def __init__(self) -> None:
        self.filters: List[DefaultFilter] = [
            DefaultFilter(
                FILTER_TIMESTAMP,
                _make_input(
                    FILTER_TIMESTAMP,
                    *(
                        GraphQLInputField(bound, GRAPHQL_STRING)
                        for bound in RANGE_BOUNDS + ("eq",)
                    ),
                ),
                timestamp_filter,
            ),
            DefaultFilter(
                FILTER_INT,
                _make_input(
                    FILTER_INT, *(GraphQLInputField(bound, GRAPHQL_INT) for bound in RANGE_BOUNDS)
                ),
                int_filter,
            ),
            DefaultFilter(
                FILTER_STRING,
                _make_input(FILTER_STRING, GraphQLInputField("eq", GRAPHQL_STRING)),
                string_filter,
            ),
            DefaultFilter(
                FILTER_STRING_ARRAY,
                _make_input(
                    FILTER_STRING_ARRAY,
                    GraphQLInputField("contains_all", GRAPHQL_STRING_ARRAY),
                    GraphQLInputField("contains_any", GRAPHQL_STRING_ARRAY),
                ),
                string_array_filter,
            ),
            DefaultFilter(
                FILTER_BOOLEAN,
                _make_input(FILTER_BOOLEAN, GraphQLInputField("is", GRAPHQL_BOOLEAN)),
                boolean_filter,
            ),
            DefaultFilter(
                ENUMERATION_FILTER,
                _make_input(ENUMERATION_FILTER, GraphQLInputField("search", FILTER_STRING)),
                enumeration_filter,
            ),
        ]

    def get_filter(self, filter_name: str) -> DefaultFilter:
        """Return the filter with the given name, raising SchemaLookupError if there is none."""
        default_filter = funcy.first(
            default_filter for default_filter in self.filters if default_filter.name == filter_name
        )
        if default_filter is None:
            raise SchemaLookupError("unable to locate filter: {}".format(filter_name))
        return default_filter

    def has_filter(self, filter_name: str) -> bool:
        return any(default_filter.name == filter_name for default_filter in self.filters)
