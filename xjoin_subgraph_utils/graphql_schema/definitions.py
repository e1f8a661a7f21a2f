# Copyright 2022-present Kensho Technologies, LLC.
"""Definitions making up a GraphQL schema: enums, inputs, object types, fields and queries.

These are deliberately simple containers. GraphqlSchema owns them, checks that their names
are unique, and renders them into SDL.
"""
from dataclasses import dataclass, field
from typing import List

import funcy

from ..exceptions import SchemaLookupError
from .types import BUILTIN_SCALAR_NAMES, ENUMERATION_SCALAR_NAMES


@dataclass
class GraphQLEnum:
    """An enum, e.g. enum ORDER_DIR { ASC DESC }."""

    name: str
    values: List[str] = field(default_factory=list)

    def add_value(self, value: str) -> None:
        self.values.append(value)


@dataclass
class GraphQLInputField:
    """One field of an input, e.g. "eq: String"."""

    name: str
    type: str


@dataclass
class GraphQLInput:
    """An input used to filter a query, e.g. input HostFilter { id: FilterString }."""

    name: str
    fields: List[GraphQLInputField] = field(default_factory=list)

    def add_field(self, input_field: GraphQLInputField) -> None:
        self.fields.append(input_field)

    def get_field(self, field_name: str) -> GraphQLInputField:
        """Return the field with the given name, raising SchemaLookupError if there is none."""
        input_field = funcy.first(
            input_field for input_field in self.fields if input_field.name == field_name
        )
        if input_field is None:
            raise SchemaLookupError(
                "unable to find field: {} on GraphQLInput {}".format(field_name, self.name)
            )
        return input_field


@dataclass
class GraphQLType:
    """The type of a field or query response, e.g. Name, Name!, [Name], [Name]! or [Name!]!."""

    name: str
    is_array: bool = False
    is_required: bool = False
    is_item_required: bool = False  # Only meaningful for arrays.

    def __str__(self) -> str:
        type_string = self.name
        if self.is_array:
            if self.is_item_required:
                type_string += "!"
            type_string = "[{}]".format(type_string)
        if self.is_required:
            type_string += "!"
        return type_string

    def is_scalar(self) -> bool:
        return self.name in BUILTIN_SCALAR_NAMES

    def is_enumeration_scalar(self) -> bool:
        return self.name in ENUMERATION_SCALAR_NAMES


@dataclass
class GraphQLQueryParameter:
    """A parameter of a query or field. An empty default value means there is no default."""

    name: str
    type: str
    default_value: str = ""

    def __str__(self) -> str:
        if self.default_value:
            return "{}: {} = {}".format(self.name, self.type, self.default_value)
        return "{}: {}".format(self.name, self.type)


def _render_parameters(parameters: List[GraphQLQueryParameter]) -> str:
    if not parameters:
        return ""
    return "({})".format(", ".join(str(parameter) for parameter in parameters))


@dataclass
class GraphQLField:
    """One field of an object type, optionally with parameters.

    For example, the field of an enumeration type listing the distinct values of a string:
        display_name(limit: Int = 10, offset: Int = 0): StringEnumeration
    """

    name: str
    type: GraphQLType
    parameters: List[GraphQLQueryParameter] = field(default_factory=list)

    def add_parameter(self, parameter: GraphQLQueryParameter) -> None:
        self.parameters.append(parameter)

    def __str__(self) -> str:
        return "{}{}: {}".format(self.name, _render_parameters(self.parameters), self.type)


@dataclass
class GraphQLObjectType:
    """An object type, optionally with Apollo federation keys that uniquely identify it.

    For example:
        type OperatingSystem @key(fields: "id") {
          id: String
          major: String
        }
    """

    name: str
    fields: List[GraphQLField] = field(default_factory=list)
    keys: List[str] = field(default_factory=list)

    def add_field(self, object_field: GraphQLField) -> None:
        self.fields.append(object_field)

    def add_key(self, key: str) -> None:
        self.keys.append(key)

    def get_field_type(self, field_name: str) -> GraphQLType:
        """Return the type of the named field, raising SchemaLookupError if there is none."""
        object_field = funcy.first(
            object_field for object_field in self.fields if object_field.name == field_name
        )
        if object_field is None:
            raise SchemaLookupError(
                "field {} not found on GraphQLObjectType {}".format(field_name, self.name)
            )
        return object_field.type


@dataclass
class GraphQLQuery:
    """A field of the root Query type.

    For example:
        Hosts(filter: HostFilter, limit: Int = 10, order_by: HOSTS_ORDER_BY = id): Hosts!
    """

    name: str
    response: GraphQLType = field(default_factory=lambda: GraphQLType(""))
    parameters: List[GraphQLQueryParameter] = field(default_factory=list)

    def add_parameter(self, parameter: GraphQLQueryParameter) -> None:
        self.parameters.append(parameter)

    def __str__(self) -> str:
        return "{}{}: {}".format(self.name, _render_parameters(self.parameters), self.response)
