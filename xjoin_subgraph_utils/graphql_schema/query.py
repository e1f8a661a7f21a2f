# Copyright 2022-present Kensho Technologies, LLC.
"""Translate the selections and filters of a GraphQL query into parts of an Elasticsearch query."""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from graphql.language.ast import FieldNode, SelectionNode

from ..avro.utils import input_name
from ..exceptions import (
    InvalidFilterValueError,
    InvalidQueryArgumentError,
    InvalidSelectionKindError,
    SchemaLookupError,
    UnknownFilterFieldError,
)
from .schema import GraphqlSchema


def graphql_selection_to_es_source_fields(
    parent: Sequence[str], selections: Iterable[SelectionNode]
) -> List[str]:
    """Return the document fields that need to be fetched to resolve the given selections.

    Args:
        parent: names of the fields enclosing the selections, e.g. ["host"] for the selections
                made on the items of the root query
        selections: selection nodes of a graphql-core query AST

    Returns:
        dot-separated paths of every selected leaf field, in selection order,
        e.g. ["host.id", "host.canonical_facts.fqdn"]

    Raises:
        InvalidSelectionKindError if a selection is not a plain field, e.g. a fragment spread
    """
    source_fields: List[str] = []
    for selection in selections:
        if not isinstance(selection, FieldNode):
            raise InvalidSelectionKindError("invalid selection kind: {}".format(selection.kind))

        path = list(parent) + [selection.name.value]
        if selection.selection_set is not None:
            source_fields.extend(
                graphql_selection_to_es_source_fields(path, selection.selection_set.selections)
            )
        else:
            source_fields.append(".".join(path))
    return source_fields


def graphql_filters_to_es_filters(
    parent: Sequence[str], query_filters: Optional[Mapping[str, Any]], schema: GraphqlSchema
) -> List[Dict[str, Any]]:
    """Return the Elasticsearch filter clauses equivalent to the filter argument of a query.

    The filter input used to interpret query_filters is the one generated for the last
    field in parent. Fields filtered with a default filter become one clause each, while
    fields holding a nested filter input are translated recursively.

    Args:
        parent: non-empty list of field names leading to the filtered object, e.g. ["host"]
        query_filters: the value of the filter argument, e.g. {"id": {"eq": "abc"}}
        schema: the GraphQL schema the query was made against

    Returns:
        list of Elasticsearch filter clauses, e.g. [{"term": {"host.id": "abc"}}]
    """
    if not parent:
        raise AssertionError("Expected a non-empty parent path, got: {}".format(parent))
    if query_filters is None:
        return []
    if not isinstance(query_filters, Mapping):
        raise InvalidFilterValueError(
            "Expected the filter on {} to be an object, but got {!r}.".format(
                ".".join(parent), query_filters
            )
        )

    parent_input = schema.get_input(input_name(parent[-1]))
    root = ".".join(parent)

    es_filters: List[Dict[str, Any]] = []
    for filter_key, filter_value in query_filters.items():
        try:
            filter_type = parent_input.get_field(filter_key).type
        except SchemaLookupError as e:
            raise UnknownFilterFieldError(str(e)) from e

        if schema.default_filters.has_filter(filter_type):
            default_filter = schema.default_filters.get_filter(filter_type)
            es_filters.append(default_filter.build_es_filter(filter_key, filter_value, root))
        else:
            es_filters.extend(
                graphql_filters_to_es_filters(list(parent) + [filter_key], filter_value, schema)
            )
    return es_filters


def validate_order_by_field(schema: GraphqlSchema, order_by: str) -> str:
    """Return order_by unchanged if results can be sorted by it, raising otherwise."""
    if order_by not in schema.root_order_by_fields:
        raise InvalidQueryArgumentError(
            "invalid order_by field: {}. Results of {} can be ordered by: {}".format(
                order_by, schema.root_query_name, ", ".join(schema.root_order_by_fields)
            )
        )
    return order_by
