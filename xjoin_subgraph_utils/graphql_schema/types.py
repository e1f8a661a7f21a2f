# Copyright 2022-present Kensho Technologies, LLC.
# Names of the built-in filter inputs. Each one is declared in every generated schema.
FILTER_STRING = "FilterString"
FILTER_STRING_ARRAY = "FilterStringArray"
FILTER_BOOLEAN = "FilterBoolean"
FILTER_TIMESTAMP = "FilterTimestamp"
FILTER_INT = "FilterInt"
ENUMERATION_FILTER = "EnumerationFilter"

# GraphQL type names produced from xjoin.type values.
GRAPHQL_STRING = "String"
GRAPHQL_INT = "Int"
GRAPHQL_FLOAT = "Float"
GRAPHQL_BOOLEAN = "Boolean"
GRAPHQL_ID = "ID"
GRAPHQL_STRING_ARRAY = "[String]"

# Pseudo-types: they never appear in the SDL, and mark fields that produce their own entities.
GRAPHQL_OBJECT = "Object"
GRAPHQL_REFERENCE = "Reference"

BUILTIN_SCALAR_NAMES = frozenset({"String", "Int", "Boolean", "Float", "Id", GRAPHQL_ID})

# Scalars, enums and types that every generated schema declares.
JSON_OBJECT_SCALAR = "JSONObject"
ORDER_DIR_ENUM = "ORDER_DIR"
ENUMERATION_ORDER_BY_ENUM = "ENUMERATION_ORDER_BY"
COLLECTION_META_TYPE = "CollectionMeta"

STRING_ENUMERATION_TYPE = "StringEnumeration"
BOOLEAN_ENUMERATION_TYPE = "BooleanEnumeration"
ENUMERATION_SCALAR_NAMES = frozenset(
    {
        STRING_ENUMERATION_TYPE,
        "IntEnumeration",
        BOOLEAN_ENUMERATION_TYPE,
        "FloatEnumeration",
        "IdEnumeration",
    }
)

# The enumeration type used for each GraphQL scalar that supports xjoin.enumeration.
SCALAR_TO_ENUMERATION_TYPE = {
    GRAPHQL_STRING: STRING_ENUMERATION_TYPE,
    GRAPHQL_BOOLEAN: BOOLEAN_ENUMERATION_TYPE,
}

DEFAULT_LIMIT = "10"
DEFAULT_OFFSET = "0"
DEFAULT_ORDER_BY = "id"
DEFAULT_ENUMERATION_ORDER_BY = "value"
DEFAULT_ORDER_HOW = "ASC"
