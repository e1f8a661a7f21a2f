# Copyright 2022-present Kensho Technologies, LLC.
import logging
from typing import Any, List, Mapping, Sequence, Union

from ..exceptions import (
    InvalidAvroSchemaError,
    MissingPrimaryKeyError,
    MultiplePrimaryKeysError,
    SchemaDepthExceededError,
    UnsupportedEnumerationTypeError,
)
from ..graphql_schema.schema import (
    GraphQLEnum,
    GraphQLField,
    GraphQLInput,
    GraphQLInputField,
    GraphQLObjectType,
    GraphQLQuery,
    GraphQLQueryParameter,
    GraphqlSchema,
    GraphQLType,
)
from ..graphql_schema.types import (
    COLLECTION_META_TYPE,
    DEFAULT_ENUMERATION_ORDER_BY,
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    DEFAULT_ORDER_BY,
    DEFAULT_ORDER_HOW,
    ENUMERATION_FILTER,
    ENUMERATION_ORDER_BY_ENUM,
    GRAPHQL_INT,
    GRAPHQL_OBJECT,
    GRAPHQL_REFERENCE,
    JSON_OBJECT_SCALAR,
    ORDER_DIR_ENUM,
    SCALAR_TO_ENUMERATION_TYPE,
)
from .avro_schema import (
    AVRO_RECORD,
    MAX_SCHEMA_DEPTH,
    XJOIN_TYPE_REFERENCE,
    AvroSchema,
    Field,
    SingleType,
)
from .utils import (
    enumeration_name,
    input_name,
    order_by_enum_name,
    order_by_scalar_name,
    query_name,
    type_name,
)


logger = logging.getLogger(__name__)

_ENTITY_GRAPHQL_TYPES = frozenset({GRAPHQL_OBJECT, GRAPHQL_REFERENCE})


def _build_query(field_type_name: str) -> GraphQLQuery:
    """Return the root query listing every instance of a reference type, e.g. Hosts."""
    plural_name = query_name(field_type_name)
    graphql_query = GraphQLQuery(plural_name, GraphQLType(plural_name, is_required=True))
    graphql_query.add_parameter(GraphQLQueryParameter("filter", input_name(field_type_name)))
    graphql_query.add_parameter(GraphQLQueryParameter("limit", GRAPHQL_INT, DEFAULT_LIMIT))
    graphql_query.add_parameter(GraphQLQueryParameter("offset", GRAPHQL_INT, DEFAULT_OFFSET))
    graphql_query.add_parameter(
        GraphQLQueryParameter(
            "order_by", order_by_enum_name(field_type_name), DEFAULT_ORDER_BY
        )
    )
    graphql_query.add_parameter(
        GraphQLQueryParameter("order_how", ORDER_DIR_ENUM, DEFAULT_ORDER_HOW)
    )
    return graphql_query


def _build_enumeration_query(field_type_name: str) -> GraphQLQuery:
    """Return the root query exposing the enumerations of a reference type."""
    name = enumeration_name(field_type_name)
    return GraphQLQuery(name, GraphQLType(name, is_required=True))


def _build_collection_type(field_type_name: str) -> GraphQLObjectType:
    """Return the type of one page of a root query: the matching items plus paging metadata."""
    collection_type = GraphQLObjectType(query_name(field_type_name))
    collection_type.add_field(
        GraphQLField(
            "data",
            GraphQLType(field_type_name, is_array=True, is_required=True, is_item_required=True),
        )
    )
    collection_type.add_field(
        GraphQLField("meta", GraphQLType(COLLECTION_META_TYPE, is_required=True))
    )
    return collection_type


def _build_enumeration_field(
    field: Field, graphql_type_name: str, graphql_schema: GraphqlSchema
) -> GraphQLField:
    """Return the field listing the distinct values of a scalar field, and their counts."""
    enumeration_type_name = SCALAR_TO_ENUMERATION_TYPE.get(graphql_type_name)
    if enumeration_type_name is None:
        raise UnsupportedEnumerationTypeError(
            "Field {} has xjoin.enumeration set, but enumerations are only supported for "
            "the following GraphQL types: {}. Got: {}".format(
                field.name, sorted(SCALAR_TO_ENUMERATION_TYPE), graphql_type_name
            )
        )

    enumeration_field = GraphQLField(field.name, GraphQLType(enumeration_type_name))
    # Named after the root filter input, e.g. HostFilter: HostFilter.
    enumeration_field.add_parameter(
        GraphQLQueryParameter(graphql_schema.root_filter, graphql_schema.root_filter)
    )
    enumeration_field.add_parameter(GraphQLQueryParameter("filter", ENUMERATION_FILTER))
    enumeration_field.add_parameter(GraphQLQueryParameter("limit", GRAPHQL_INT, DEFAULT_LIMIT))
    enumeration_field.add_parameter(
        GraphQLQueryParameter("offset", GRAPHQL_INT, DEFAULT_OFFSET)
    )
    enumeration_field.add_parameter(
        GraphQLQueryParameter(
            "order_by", ENUMERATION_ORDER_BY_ENUM, DEFAULT_ENUMERATION_ORDER_BY
        )
    )
    enumeration_field.add_parameter(
        GraphQLQueryParameter("order_how", ORDER_DIR_ENUM, DEFAULT_ORDER_HOW)
    )
    return enumeration_field


class AvroSchemaParser:
    """Convert an Avro schema annotated with xjoin.* attributes into a GraphQL schema."""

    def __init__(self, avro_schema: Union[str, Mapping[str, Any]]) -> None:
        """Deserialize the Avro schema and validate its top-level shape.

        Args:
            avro_schema: the Avro schema, either as a JSON string or as its decoded dict form.
                         It must be a record with a name, containing exactly one root field.
                         The root field must be a record with xjoin.type=reference, and must
                         have at least one child field.

        Raises:
            InvalidAvroSchemaError if the top-level shape of the schema is invalid, and
            other AvroSchemaError subclasses if any of its fields is malformed
        """
        if not avro_schema:
            raise InvalidAvroSchemaError(
                "avroSchema is a required parameter to create an AvroSchemaParser"
            )

        if isinstance(avro_schema, str):
            self.avro_schema = AvroSchema.from_json(avro_schema)
        else:
            self.avro_schema = AvroSchema.from_dict(avro_schema)

        if self.avro_schema.type != AVRO_RECORD:
            raise InvalidAvroSchemaError('avroSchema type must be "record"')

        if not self.avro_schema.name:
            raise InvalidAvroSchemaError("avroSchema must have a name")

        if len(self.avro_schema.fields) != 1:
            raise InvalidAvroSchemaError("avroSchema must contain a single root field")

        root_field = self.root_field
        if not root_field.name:
            raise InvalidAvroSchemaError("avroSchema root field must have a name")

        if root_field.get_avro_type() != AVRO_RECORD:
            raise InvalidAvroSchemaError("avroSchema root field must be type=record")

        if root_field.get_custom_type() != XJOIN_TYPE_REFERENCE:
            raise InvalidAvroSchemaError("avroSchema root field must be xjoin.type=reference")

        if not isinstance(root_field.type, SingleType):
            raise InvalidAvroSchemaError(
                "avroSchema root field type must be an object containing at least one field"
            )

        if not root_field.resolved_type.fields:
            raise InvalidAvroSchemaError(
                "avroSchema root field must contain at least one child field"
            )

    @property
    def root_field(self) -> Field:
        """Return the single top-level field, describing the entity being indexed."""
        return self.avro_schema.fields[0]

    def convert_to_graphql(self) -> GraphqlSchema:
        """Build the GraphQL schema for the entity described by the Avro schema.

        Returns:
            GraphqlSchema named after the root field, containing a root query for every
            field with xjoin.type=reference, along with the object types, filter inputs,
            enums and enumeration types they need
        """
        graphql_schema = GraphqlSchema(self.root_field.name)
        self._parse_avro_fields(self.avro_schema.fields, [], graphql_schema, 0)
        logger.debug(
            "Converted Avro schema %s into GraphQL schema with queries: %s",
            self.avro_schema.name,
            [query.name for query in graphql_schema.queries],
        )
        return graphql_schema

    def _parse_avro_fields(
        self,
        fields: Sequence[Field],
        parent: List[str],
        graphql_schema: GraphqlSchema,
        depth: int,
    ) -> List[Field]:
        """Compile the given sibling fields, returning the ones that are indexed.

        Each returned field has its enumeration flag set if anything in its subtree is
        enumerable.
        """
        if depth > MAX_SCHEMA_DEPTH:
            raise SchemaDepthExceededError(
                "Avro schema is nested deeper than the maximum depth of {} at {}.".format(
                    MAX_SCHEMA_DEPTH, ".".join(parent)
                )
            )

        compiled_fields = []
        for field in fields:
            if not field.indexed:
                logger.debug("Skipping field %s, it is not indexed", field.name)
                continue

            field.validate()
            compiled_fields.append(self._parse_avro_field(field, parent, graphql_schema, depth))
        return compiled_fields

    def _parse_avro_field(
        self, field: Field, parent: List[str], graphql_schema: GraphqlSchema, depth: int
    ) -> Field:
        """Emit the GraphQL entities of a single field and its subtree."""
        field_graphql_type = field.get_graphql_type()
        if field_graphql_type not in _ENTITY_GRAPHQL_TYPES or not field.has_children():
            return field

        path = parent + [field.name]
        children = self._parse_avro_fields(
            field.get_children(), path, graphql_schema, depth + 1
        )

        field_type_name = type_name(field.name)
        graphql_input = GraphQLInput(input_name(field_type_name))
        graphql_type = GraphQLObjectType(field_type_name)
        enumeration_type = GraphQLObjectType(enumeration_name(field_type_name))
        order_by_enum = GraphQLEnum(order_by_enum_name(field_type_name))

        has_primary_key = False
        has_enumeration = False
        for child in children:
            if child.is_primary_key:
                if has_primary_key:
                    raise MultiplePrimaryKeysError(
                        "multiple primary keys defined on {}".format(field.name)
                    )
                graphql_type.add_key(child.name)
                has_primary_key = True

            child_filter_type = child.get_filter_type()
            if child_filter_type:
                graphql_input.add_field(GraphQLInputField(child.name, child_filter_type))
            order_by_enum.add_value(child.name)

            child_graphql_type = child.get_graphql_type()
            if child_graphql_type in _ENTITY_GRAPHQL_TYPES:
                if child.has_children():
                    child_type_name = type_name(child.name)
                    graphql_type.add_field(GraphQLField(child.name, GraphQLType(child_type_name)))
                    if child.is_enumerable:
                        enumeration_type.add_field(
                            GraphQLField(
                                child.name, GraphQLType(enumeration_name(child_type_name))
                            )
                        )
                        has_enumeration = True
                else:
                    # Free-form JSON cannot be enumerated.
                    graphql_type.add_field(
                        GraphQLField(child.name, GraphQLType(JSON_OBJECT_SCALAR))
                    )
            else:
                graphql_schema.add_root_order_by_field(".".join(path[1:] + [child.name]))
                graphql_type.add_field(GraphQLField(child.name, GraphQLType(child_graphql_type)))
                if child.is_enumerable:
                    enumeration_type.add_field(
                        _build_enumeration_field(child, child_graphql_type, graphql_schema)
                    )
                    has_enumeration = True

        graphql_schema.add_input(graphql_input)
        graphql_schema.add_type(graphql_type)
        logger.debug("Added type %s and input %s", graphql_type.name, graphql_input.name)

        if has_enumeration:
            graphql_schema.add_type(enumeration_type)
            logger.debug("Added enumeration type %s", enumeration_type.name)

        if field_graphql_type == GRAPHQL_REFERENCE:
            if not has_primary_key:
                raise MissingPrimaryKeyError(
                    "missing xjoin.primary.key child field on reference field {}".format(
                        field.name
                    )
                )

            root_query = _build_query(field_type_name)
            graphql_schema.add_query(root_query)
            graphql_schema.add_enum(order_by_enum)
            graphql_schema.add_type(_build_collection_type(field_type_name))
            # Declared for consumers of the registered schema, no field in the schema uses it.
            graphql_schema.add_scalar(order_by_scalar_name(field_type_name))
            logger.debug("Added root query %s for reference field %s", root_query.name, field.name)

            if has_enumeration:
                enumeration_query = _build_enumeration_query(field_type_name)
                graphql_schema.add_query(enumeration_query)
                logger.debug("Added enumeration query %s", enumeration_query.name)

        return field.set_enumeration(has_enumeration)
