# Copyright 2022-present Kensho Technologies, LLC.
from typing import Iterable, List, Optional, TypeVar

import funcy
from graphql import DocumentNode, GraphQLSyntaxError, parse

from ..avro.utils import enumeration_name, input_name, order_by_scalar_name, query_name, type_name
from ..exceptions import DuplicateNameError, SchemaLookupError, SchemaSerializationError
from .default_filters import DefaultFilters
from .definitions import (  # noqa
    GraphQLEnum,
    GraphQLField,
    GraphQLInput,
    GraphQLInputField,
    GraphQLObjectType,
    GraphQLQuery,
    GraphQLQueryParameter,
    GraphQLType,
)
from .types import (
    BOOLEAN_ENUMERATION_TYPE,
    COLLECTION_META_TYPE,
    ENUMERATION_ORDER_BY_ENUM,
    GRAPHQL_BOOLEAN,
    GRAPHQL_INT,
    GRAPHQL_STRING,
    JSON_OBJECT_SCALAR,
    ORDER_DIR_ENUM,
    STRING_ENUMERATION_TYPE,
)


INDENT = "  "

NamedDefinitionT = TypeVar(
    "NamedDefinitionT", GraphQLEnum, GraphQLInput, GraphQLObjectType, GraphQLQuery
)


def _build_enumeration_types(
    enumeration_type_name: str, value_type_name: str
) -> List[GraphQLObjectType]:
    """Return the value type and the page type of an enumeration, e.g. StringEnumeration."""
    value_type = GraphQLObjectType(
        enumeration_type_name + "Value",
        [
            GraphQLField("value", GraphQLType(value_type_name, is_required=True)),
            GraphQLField("count", GraphQLType(GRAPHQL_INT, is_required=True)),
        ],
    )
    page_type = GraphQLObjectType(
        enumeration_type_name,
        [
            GraphQLField("data", GraphQLType(value_type.name, is_array=True, is_required=True)),
            GraphQLField("meta", GraphQLType(COLLECTION_META_TYPE, is_required=True)),
        ],
    )
    return [value_type, page_type]


def _render_enum_value(value: str) -> str:
    # Dotted field paths are not GraphQL names, the schema registry stores them quoted.
    if "." in value:
        return '"{}"'.format(value)
    return value


def _render_block(header: str, lines: Iterable[str]) -> str:
    body = "".join("{}{}\n".format(INDENT, line) for line in lines)
    return "{} {{\n{}}}".format(header, body)


def _find_by_name(
    definitions: Iterable[NamedDefinitionT], name: str
) -> Optional[NamedDefinitionT]:
    return funcy.first(definition for definition in definitions if definition.name == name)


class GraphqlSchema:
    """GraphQL schema being built from an Avro schema, rendered to SDL on demand.

    On construction, the schema already contains the definitions every generated schema
    shares: the ORDER_DIR and ENUMERATION_ORDER_BY enums, the CollectionMeta type, the
    String and Boolean enumeration types, the JSONObject scalar, and the input of every
    default filter. Names are unique within each kind of definition.
    """

    def __init__(self, avro_root_name: str) -> None:
        """Create an empty schema for the entity with the given root field name, e.g. "host"."""
        self.avro_root_name = avro_root_name

        root_type_name = type_name(avro_root_name)
        self.root_query_name = query_name(avro_root_name)
        self.root_filter = input_name(avro_root_name)
        self.enumerations_root = enumeration_name(root_type_name)
        self.root_order_by_scalar_name = order_by_scalar_name(avro_root_name)
        self.root_order_by_fields: List[str] = []

        self.queries: List[GraphQLQuery] = []
        self.types: List[GraphQLObjectType] = []
        self.scalars: List[str] = []
        self.enums: List[GraphQLEnum] = []
        self.inputs: List[GraphQLInput] = []
        self._schema_string: Optional[str] = None

        self.add_enum(GraphQLEnum(ORDER_DIR_ENUM, ["ASC", "DESC"]))
        self.add_enum(GraphQLEnum(ENUMERATION_ORDER_BY_ENUM, ["value", "count"]))

        self.add_type(
            GraphQLObjectType(
                COLLECTION_META_TYPE,
                [
                    GraphQLField("count", GraphQLType(GRAPHQL_INT)),
                    GraphQLField("total", GraphQLType(GRAPHQL_INT)),
                ],
            )
        )
        for enumeration_type in _build_enumeration_types(
            STRING_ENUMERATION_TYPE, GRAPHQL_STRING
        ) + _build_enumeration_types(BOOLEAN_ENUMERATION_TYPE, GRAPHQL_BOOLEAN):
            self.add_type(enumeration_type)

        self.add_scalar(JSON_OBJECT_SCALAR)

        self.default_filters = DefaultFilters()
        for default_filter in self.default_filters.filters:
            self.add_input(default_filter.input)

    def _check_unique(self, kind: str, name: str, taken_names: Iterable[str]) -> None:
        if name in taken_names:
            raise DuplicateNameError(
                "{} {} is already defined on GraphQL Schema {}".format(
                    kind, name, self.avro_root_name
                )
            )

    def add_query(self, query: GraphQLQuery) -> None:
        self._check_unique("Query", query.name, (existing.name for existing in self.queries))
        self.queries.append(query)
        self._schema_string = None

    def add_type(self, object_type: GraphQLObjectType) -> None:
        self._check_unique("Type", object_type.name, (existing.name for existing in self.types))
        self.types.append(object_type)
        self._schema_string = None

    def add_scalar(self, scalar: str) -> None:
        self._check_unique("Scalar", scalar, self.scalars)
        self.scalars.append(scalar)
        self._schema_string = None

    def add_enum(self, graphql_enum: GraphQLEnum) -> None:
        self._check_unique("Enum", graphql_enum.name, (existing.name for existing in self.enums))
        self.enums.append(graphql_enum)
        self._schema_string = None

    def add_input(self, graphql_input: GraphQLInput) -> None:
        self._check_unique("Input", graphql_input.name, (existing.name for existing in self.inputs))
        self.inputs.append(graphql_input)
        self._schema_string = None

    def add_root_order_by_field(self, field_path: str) -> None:
        """Record a dot-separated path, relative to the root field, to sort results by."""
        self.root_order_by_fields.append(field_path)

    def get_query(self, name: str) -> GraphQLQuery:
        query = _find_by_name(self.queries, name)
        if query is None:
            raise SchemaLookupError(
                "query {} not found on GraphQLSchema {}".format(name, self.avro_root_name)
            )
        return query

    def get_input(self, name: str) -> GraphQLInput:
        graphql_input = _find_by_name(self.inputs, name)
        if graphql_input is None:
            raise SchemaLookupError(
                "Input not found: {} on GraphQL Schema: {}".format(name, self.avro_root_name)
            )
        return graphql_input

    def get_object_type(self, name: str) -> GraphQLObjectType:
        object_type = _find_by_name(self.types, name)
        if object_type is None:
            raise SchemaLookupError(
                "Object Type not found: {} on GraphQL Schema: {}".format(name, self.avro_root_name)
            )
        return object_type

    def get_type_from_parent(self, parent_name: str, child_name: str) -> GraphQLType:
        """Return the type of the field child_name on the object type parent_name."""
        parent_type = _find_by_name(self.types, parent_name)
        if parent_type is None:
            raise SchemaLookupError(
                "Parent Type not found: {} on GraphQL Schema: {}".format(
                    parent_name, self.avro_root_name
                )
            )

        child_field = funcy.first(
            child_field for child_field in parent_type.fields if child_field.name == child_name
        )
        if child_field is None:
            raise SchemaLookupError(
                "Child Type: {} not found on parent: {} on GraphQL Schema: {}".format(
                    child_name, parent_name, self.avro_root_name
                )
            )
        return child_field.type

    def _render_enum(self, graphql_enum: GraphQLEnum) -> str:
        if not graphql_enum.values:
            raise SchemaSerializationError(
                "Enum {} on GraphQL Schema {} must have at least one value to be converted "
                "to a string".format(graphql_enum.name, self.avro_root_name)
            )
        return _render_block(
            "enum {}".format(graphql_enum.name),
            (_render_enum_value(value) for value in graphql_enum.values),
        )

    def _render_type(self, object_type: GraphQLObjectType) -> str:
        if not object_type.fields:
            raise SchemaSerializationError(
                "Type {} on GraphQL Schema {} must have at least one field to be converted "
                "to a string".format(object_type.name, self.avro_root_name)
            )
        header = "type {}".format(object_type.name)
        for key in object_type.keys:
            header += ' @key(fields: "{}")'.format(key)
        return _render_block(header, (str(object_field) for object_field in object_type.fields))

    def _render_input(self, graphql_input: GraphQLInput) -> str:
        if not graphql_input.fields:
            raise SchemaSerializationError(
                "Input {} on GraphQL Schema {} must have at least one field to be converted "
                "to a string".format(graphql_input.name, self.avro_root_name)
            )
        return _render_block(
            "input {}".format(graphql_input.name),
            (
                "{}: {}".format(input_field.name, input_field.type)
                for input_field in graphql_input.fields
            ),
        )

    def _render_query_type(self) -> str:
        if not self.queries:
            raise SchemaSerializationError(
                "GraphQL Schema {} must have at least one query to be converted to a "
                "string".format(self.avro_root_name)
            )
        for query in self.queries:
            if not query.response or not query.response.name:
                raise SchemaSerializationError(
                    "Query {} on GraphQL Schema {} must have a valid response to be converted "
                    "to a string".format(query.name, self.avro_root_name)
                )
        return _render_block("type Query", (str(query) for query in self.queries))

    def to_string(self, refresh: bool = False) -> str:
        """Render the schema to SDL, reusing the previous rendering unless refresh is set.

        Definitions are rendered in a fixed order: scalars, enums, types, inputs, and finally
        the Query type. Within each section, definitions keep the order they were added in.

        Args:
            refresh: render the schema again even if it has not changed since the last call.
                     Needed only when a definition was modified after being added.

        Returns:
            SDL string describing the schema

        Raises:
            SchemaSerializationError if the schema has no queries, or contains an enum without
            values, a type or input without fields, or a query without a response type
        """
        if self._schema_string is not None and not refresh:
            return self._schema_string

        query_type = self._render_query_type()
        definitions = ["scalar {}".format(scalar) for scalar in self.scalars]
        definitions.extend(self._render_enum(graphql_enum) for graphql_enum in self.enums)
        definitions.extend(self._render_type(object_type) for object_type in self.types)
        definitions.extend(self._render_input(graphql_input) for graphql_input in self.inputs)
        definitions.append(query_type)

        self._schema_string = "\n\n".join(definitions) + "\n"
        return self._schema_string

    def __str__(self) -> str:
        return self.to_string()

    def to_document(self) -> DocumentNode:
        """Return the graphql-core AST of the rendered schema.

        Raises:
            SchemaSerializationError if the rendered schema is not valid SDL, e.g. because
            an enum holds a quoted dotted value such as "canonical_facts.fqdn"
        """
        try:
            return parse(self.to_string())
        except GraphQLSyntaxError as e:
            raise SchemaSerializationError(
                "GraphQL Schema {} could not be parsed: {}".format(self.avro_root_name, e.message)
            ) from e
