# Copyright 2022-present Kensho Technologies, LLC.
"""Typed, validated model of an Avro record schema annotated with xjoin.* attributes.

Avro lets the type of a field be written in three different ways:
    - a bare type name, e.g. "type": "string", in which case the xjoin.* attributes
      live on the field itself;
    - a single type object, e.g. "type": {"type": "string", "xjoin.type": "string"};
    - a nullable union, e.g. "type": ["null", {"type": "string", "xjoin.type": "string"}].

Each of these is deserialized into its own variant (NamedType, SingleType and NullableType),
and Field.resolved_type hides the difference: it is the TypeNode that carries the
effective Avro type and xjoin.* attributes of the field, no matter how it was written.

All structural validation happens when the JSON data is deserialized, so a Field or
AvroSchema that exists is always well-formed. Whether a field has all the attributes
required to be converted into GraphQL is checked separately by Field.validate().
"""
from dataclasses import dataclass, field, replace
from functools import cached_property
import json
from typing import Any, Dict, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from ..exceptions import (
    InvalidAvroSchemaError,
    InvalidNullableUnionError,
    MissingCustomTypeError,
    MissingNameError,
    MissingTypeError,
    SchemaDepthExceededError,
    UnknownCustomTypeError,
)
from ..graphql_schema.types import (
    FILTER_BOOLEAN,
    FILTER_STRING,
    FILTER_STRING_ARRAY,
    FILTER_TIMESTAMP,
    GRAPHQL_BOOLEAN,
    GRAPHQL_OBJECT,
    GRAPHQL_REFERENCE,
    GRAPHQL_STRING,
    GRAPHQL_STRING_ARRAY,
)
from .utils import input_name


AVRO_NULL = "null"
AVRO_RECORD = "record"

# Supported values of the xjoin.type attribute.
XJOIN_TYPE_STRING = "string"
XJOIN_TYPE_BOOLEAN = "boolean"
XJOIN_TYPE_DATE_NANOS = "date_nanos"
XJOIN_TYPE_JSON = "json"
XJOIN_TYPE_REFERENCE = "reference"
XJOIN_TYPE_ARRAY = "array"
XJOIN_TYPE_BYTE = "byte"

# Deeper schemas are rejected, both when deserializing and when walking the schema.
MAX_SCHEMA_DEPTH = 64

NULLABLE_UNION_ERROR_TEMPLATE = (
    "Invalid field: {}. Fields are only allowed to have at most 2 types. When more than one "
    "type is used, the first must be null and the second must be a valid type object."
)


class FieldTypes(NamedTuple):
    """The GraphQL type and filter input type that a field is converted into."""

    graphql_type: str
    filter_type: str  # Empty when the field cannot be filtered on.


# The "json" type is absent: its filter type depends on whether the field has children.
_TYPE_CONVERSIONS: Dict[str, FieldTypes] = {
    XJOIN_TYPE_STRING: FieldTypes(GRAPHQL_STRING, FILTER_STRING),
    XJOIN_TYPE_DATE_NANOS: FieldTypes(GRAPHQL_STRING, FILTER_TIMESTAMP),
    XJOIN_TYPE_BOOLEAN: FieldTypes(GRAPHQL_BOOLEAN, FILTER_BOOLEAN),
    XJOIN_TYPE_BYTE: FieldTypes(GRAPHQL_STRING, FILTER_STRING),
    XJOIN_TYPE_REFERENCE: FieldTypes(GRAPHQL_REFERENCE, FILTER_STRING),
    XJOIN_TYPE_ARRAY: FieldTypes(GRAPHQL_STRING_ARRAY, FILTER_STRING_ARRAY),
}


def _get_string(data: Mapping[str, Any], key: str, context: str) -> str:
    """Return the string attribute under the given key, or the empty string if it is absent."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidAvroSchemaError(
            'Expected attribute "{}" of {} to be a string, but got {!r}.'.format(
                key, context, value
            )
        )
    return value


def _get_bool(data: Mapping[str, Any], key: str, default: bool, context: str) -> bool:
    """Return the boolean attribute under the given key, or the default if it is absent."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise InvalidAvroSchemaError(
            'Expected attribute "{}" of {} to be a boolean, but got {!r}.'.format(
                key, context, value
            )
        )
    return value


def _get_fields(
    data: Mapping[str, Any], key: str, context: str, depth: int
) -> Tuple["Field", ...]:
    """Deserialize the list of fields under the given key, if any."""
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise InvalidAvroSchemaError(
            'Expected attribute "{}" of {} to be a list of fields, but got {!r}.'.format(
                key, context, value
            )
        )
    return tuple(Field.from_dict(field_data, depth=depth) for field_data in value)


def _is_null_marker(value: Any) -> bool:
    """Return True if the value is the "null" member of a nullable union."""
    if isinstance(value, str):
        return value == AVRO_NULL
    if isinstance(value, Mapping):
        return value.get("type") == AVRO_NULL
    return False


@dataclass(frozen=True)
class TypeNode:
    """One node in the type tree of an Avro schema."""

    avro_type: str = ""  # The raw Avro type, e.g. "string" or "record".
    custom_type: str = ""  # The xjoin.type attribute, e.g. "date_nanos" or "reference".
    is_enumerable: bool = False
    is_primary_key: bool = False
    name: str = ""
    fields: Tuple["Field", ...] = ()
    xjoin_fields: Tuple["Field", ...] = ()
    items: Optional["FieldType"] = None  # The type of the elements of an Avro array.

    # Passed through from the Avro schema, not used when building the GraphQL schema.
    connect_name: str = ""
    connect_version: int = 1
    xjoin_case: str = ""

    @property
    def children(self) -> Tuple["Field", ...]:
        """Return the child fields of this node, preferring "fields" over "xjoin.fields"."""
        if self.fields:
            return self.fields
        return self.xjoin_fields

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], depth: int = 0) -> "TypeNode":
        """Deserialize a type object, e.g. {"type": "string", "xjoin.type": "string"}."""
        if not isinstance(data, Mapping):
            raise InvalidAvroSchemaError(
                "Expected a type object, but got {!r}.".format(data)
            )
        if depth > MAX_SCHEMA_DEPTH:
            raise SchemaDepthExceededError(
                "Avro schema is nested deeper than the maximum depth of {}.".format(
                    MAX_SCHEMA_DEPTH
                )
            )

        name = _get_string(data, "name", "type object")
        context = 'type object "{}"'.format(name) if name else "type object"

        connect_version = data.get("connect.version", 1)
        if isinstance(connect_version, bool) or not isinstance(connect_version, int):
            raise InvalidAvroSchemaError(
                'Expected attribute "connect.version" of {} to be an integer, '
                "but got {!r}.".format(context, connect_version)
            )

        items_data = data.get("items")
        items = None
        if items_data is not None:
            items = parse_field_type(items_data, name, depth + 1)

        return cls(
            avro_type=_get_string(data, "type", context),
            custom_type=_get_string(data, "xjoin.type", context),
            is_enumerable=_get_bool(data, "xjoin.enumeration", False, context),
            is_primary_key=_get_bool(data, "xjoin.primary.key", False, context),
            name=name,
            fields=_get_fields(data, "fields", context, depth + 1),
            xjoin_fields=_get_fields(data, "xjoin.fields", context, depth + 1),
            items=items,
            connect_name=_get_string(data, "connect.name", context),
            connect_version=connect_version,
            xjoin_case=_get_string(data, "xjoin.case", context),
        )


@dataclass(frozen=True)
class NamedType:
    """A field type written as a bare Avro type name, e.g. "string"."""

    avro_type: str


@dataclass(frozen=True)
class SingleType:
    """A field type written as a single type object, or a list containing only one."""

    node: TypeNode


@dataclass(frozen=True)
class NullableType:
    """A field type written as the nullable union ["null", <type object>]."""

    node: TypeNode


FieldType = Union[NamedType, SingleType, NullableType]


def parse_field_type(value: Any, field_name: str, depth: int) -> FieldType:
    """Deserialize the "type" attribute of a field into one of the field type variants.

    Args:
        value: the raw JSON value of the "type" attribute. A missing type is represented by
               an empty NamedType, and reported later by Field.validate().
        field_name: name of the field that owns the type, used in error messages
        depth: nesting depth of the field within the schema

    Returns:
        NamedType, SingleType or NullableType matching the shape of the value
    """
    if value is None:
        return NamedType("")
    if isinstance(value, str):
        return NamedType(value)
    if isinstance(value, Mapping):
        return SingleType(TypeNode.from_dict(value, depth=depth))
    if isinstance(value, list):
        if len(value) == 1 and not isinstance(value[0], list):
            return parse_field_type(value[0], field_name, depth)
        if (
            len(value) == 2
            and _is_null_marker(value[0])
            and isinstance(value[1], Mapping)
            and not _is_null_marker(value[1])
        ):
            return NullableType(TypeNode.from_dict(value[1], depth=depth))
        raise InvalidNullableUnionError(NULLABLE_UNION_ERROR_TEMPLATE.format(field_name))

    raise InvalidAvroSchemaError(
        'Expected the type of field "{}" to be a string, an object or a list, '
        "but got {!r}.".format(field_name, value)
    )


@dataclass(frozen=True)
class Field:
    """A named field of an Avro record, along with its xjoin.* attributes."""

    name: str = ""
    type: FieldType = NamedType("")
    indexed: bool = True  # Fields with "xjoin.index": false are left out of the GraphQL schema.

    # Field-level attributes. Only used when the type is a bare type name.
    xjoin_type: str = ""
    xjoin_enumeration: bool = False
    xjoin_primary_key: bool = False

    default: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], depth: int = 0) -> "Field":
        """Deserialize a field, validating its shape."""
        if not isinstance(data, Mapping):
            raise InvalidAvroSchemaError("Expected a field object, but got {!r}.".format(data))
        if depth > MAX_SCHEMA_DEPTH:
            raise SchemaDepthExceededError(
                "Avro schema is nested deeper than the maximum depth of {}.".format(
                    MAX_SCHEMA_DEPTH
                )
            )

        name = _get_string(data, "name", "field")
        context = 'field "{}"'.format(name) if name else "field"
        return cls(
            name=name,
            type=parse_field_type(data.get("type"), name, depth),
            indexed=_get_bool(data, "xjoin.index", True, context),
            xjoin_type=_get_string(data, "xjoin.type", context),
            xjoin_enumeration=_get_bool(data, "xjoin.enumeration", False, context),
            xjoin_primary_key=_get_bool(data, "xjoin.primary.key", False, context),
            default=data.get("default"),
        )

    @cached_property
    def resolved_type(self) -> TypeNode:
        """Return the TypeNode holding the effective type and attributes of the field."""
        field_type = self.type
        if isinstance(field_type, NamedType):
            return TypeNode(
                avro_type=field_type.avro_type,
                custom_type=self.xjoin_type,
                is_enumerable=self.xjoin_enumeration,
                is_primary_key=self.xjoin_primary_key,
            )
        elif isinstance(field_type, (SingleType, NullableType)):
            return field_type.node
        else:
            raise AssertionError(
                "Unreachable code reached: unexpected type {} on field {}".format(
                    field_type, self.name
                )
            )

    @cached_property
    def type_conversion(self) -> FieldTypes:
        """Return the GraphQL type and filter type the field is converted into."""
        custom_type = self.resolved_type.custom_type
        if custom_type == XJOIN_TYPE_JSON:
            filter_type = input_name(self.name) if self.has_children() else ""
            return FieldTypes(GRAPHQL_OBJECT, filter_type)

        conversion = _TYPE_CONVERSIONS.get(custom_type)
        if conversion is None:
            raise UnknownCustomTypeError(
                'Field "{}" has an unsupported xjoin.type "{}". Supported types: {}'.format(
                    self.name, custom_type, sorted(_TYPE_CONVERSIONS) + [XJOIN_TYPE_JSON]
                )
            )
        return conversion

    def get_graphql_type(self) -> str:
        """Return the GraphQL type name, or the Object/Reference pseudo-type for records."""
        return self.type_conversion.graphql_type

    def get_filter_type(self) -> str:
        """Return the name of the filter input used for this field, or "" if there is none."""
        return self.type_conversion.filter_type

    def get_avro_type(self) -> str:
        return self.resolved_type.avro_type

    def get_custom_type(self) -> str:
        return self.resolved_type.custom_type

    @property
    def is_enumerable(self) -> bool:
        return self.resolved_type.is_enumerable

    @property
    def is_primary_key(self) -> bool:
        return self.resolved_type.is_primary_key

    def get_children(self) -> Tuple["Field", ...]:
        return self.resolved_type.children

    def has_children(self) -> bool:
        return len(self.get_children()) > 0

    def set_enumeration(self, value: bool) -> "Field":
        """Return a copy of the field with its enumeration flag set to the given value."""
        field_type = self.type
        if isinstance(field_type, NamedType):
            return replace(self, xjoin_enumeration=value)
        elif isinstance(field_type, SingleType):
            return replace(self, type=SingleType(replace(field_type.node, is_enumerable=value)))
        elif isinstance(field_type, NullableType):
            return replace(
                self, type=NullableType(replace(field_type.node, is_enumerable=value))
            )
        else:
            raise AssertionError(
                "Unreachable code reached: unexpected type {} on field {}".format(
                    field_type, self.name
                )
            )

    def validate(self) -> None:
        """Ensure the field has the attributes needed to convert it into GraphQL."""
        if not self.name:
            raise MissingNameError("field is missing name attribute")
        if not self.get_avro_type():
            raise MissingTypeError("field {} is missing type attribute".format(self.name))
        if not self.get_custom_type():
            raise MissingCustomTypeError(
                "field {} is missing xjoin.type attribute".format(self.name)
            )


@dataclass(frozen=True)
class Transformation:
    """A transformation applied to the indexed data, carried through from the Avro schema."""

    input_field: str = ""
    output_field: str = ""
    type: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transformation":
        if not isinstance(data, Mapping):
            raise InvalidAvroSchemaError(
                "Expected a transformation object, but got {!r}.".format(data)
            )
        parameters = data.get("parameters")
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, Mapping):
            raise InvalidAvroSchemaError(
                'Expected attribute "parameters" of transformation to be an object, '
                "but got {!r}.".format(parameters)
            )
        return cls(
            input_field=_get_string(data, "input.field", "transformation"),
            output_field=_get_string(data, "output.field", "transformation"),
            type=_get_string(data, "type", "transformation"),
            parameters=dict(parameters),
        )


@dataclass(frozen=True)
class AvroSchema:
    """The top-level Avro record describing one indexed entity."""

    type: str = ""
    name: str = ""
    namespace: str = ""
    fields: Tuple[Field, ...] = ()
    transformations: Tuple[Transformation, ...] = ()
    xjoin_type: str = ""
    connect_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AvroSchema":
        """Deserialize an Avro schema from its decoded JSON form."""
        if not isinstance(data, Mapping):
            raise InvalidAvroSchemaError(
                "Expected the Avro schema to be a JSON object, but got {!r}.".format(data)
            )

        transformations_data = data.get("transformations")
        if transformations_data is None:
            transformations_data = []
        if not isinstance(transformations_data, Sequence) or isinstance(
            transformations_data, str
        ):
            raise InvalidAvroSchemaError(
                'Expected attribute "transformations" of avroSchema to be a list, '
                "but got {!r}.".format(transformations_data)
            )

        return cls(
            type=_get_string(data, "type", "avroSchema"),
            name=_get_string(data, "name", "avroSchema"),
            namespace=_get_string(data, "namespace", "avroSchema"),
            fields=_get_fields(data, "fields", "avroSchema", 0),
            transformations=tuple(
                Transformation.from_dict(transformation_data)
                for transformation_data in transformations_data
            ),
            xjoin_type=_get_string(data, "xjoin.type", "avroSchema"),
            connect_name=_get_string(data, "connect.name", "avroSchema"),
        )

    @classmethod
    def from_json(cls, schema_text: str) -> "AvroSchema":
        """Deserialize an Avro schema from a JSON string."""
        try:
            data = json.loads(schema_text)
        except ValueError as e:
            raise InvalidAvroSchemaError("avroSchema is not valid JSON: {}".format(e)) from e
        return cls.from_dict(data)
