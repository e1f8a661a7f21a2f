# Copyright 2022-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from typing import Any, Mapping, Union

from .avro.avro_schema import AvroSchema, Field, TypeNode  # noqa
from .avro.avro_schema_parser import AvroSchemaParser
from .config import ElasticSearchConnection, SchemaRegistryParams  # noqa
from .exceptions import (  # noqa
    AvroSchemaError,
    ElasticSearchError,
    GraphQLSchemaError,
    QueryTranslationError,
    SchemaRegistryError,
    XJoinSubgraphError,
)
from .graphql_schema.query import (  # noqa
    graphql_filters_to_es_filters,
    graphql_selection_to_es_source_fields,
    validate_order_by_field,
)
from .graphql_schema.schema import GraphqlSchema
from .schema_registry import SchemaRegistry  # noqa
from .search import ElasticSearchClient  # noqa


__package_name__ = "xjoin-subgraph-utils"
__version__ = "0.1.0"


def convert_avro_schema_to_graphql(avro_schema: Union[str, Mapping[str, Any]]) -> GraphqlSchema:
    """Convert an Avro schema annotated with xjoin.* attributes into a GraphQL schema.

    Args:
        avro_schema: the Avro schema, either as a JSON string or as its decoded dict form

    Returns:
        GraphqlSchema describing the queries, types, inputs and enums of the schema.
        Its to_string() method renders the schema to SDL.
    """
    return AvroSchemaParser(avro_schema).convert_to_graphql()
