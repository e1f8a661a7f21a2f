# Copyright 2022-present Kensho Technologies, LLC.
class XJoinSubgraphError(Exception):
    """Generic error when processing an xjoin schema or query."""


class ConfigurationError(XJoinSubgraphError):
    """Raised when required connection settings are missing or malformed."""


class AvroSchemaError(XJoinSubgraphError):
    """Base class for all errors caused by a malformed Avro schema.

    These errors are never retryable: the schema itself must be fixed before it can be
    converted into a GraphQL schema. No partially-converted schema is ever returned.
    """


class InvalidAvroSchemaError(AvroSchemaError):
    """Raised when the top-level shape of the Avro schema is invalid.

    For example:
    - the schema is not a record, or is missing its name;
    - the schema does not contain exactly one root field;
    - the root field is not a record with xjoin.type=reference, or has no children;
    - an attribute has the wrong JSON type, e.g. a list of fields that is not a list.
    """


class InvalidNullableUnionError(AvroSchemaError):
    """Raised when a field's type is a list that does not follow the [null, type] convention."""


class MissingNameError(AvroSchemaError):
    """Raised when a field has no name."""


class MissingTypeError(AvroSchemaError):
    """Raised when a field's resolved type has no Avro type."""


class MissingCustomTypeError(AvroSchemaError):
    """Raised when a field's resolved type has no xjoin.type."""


class UnknownCustomTypeError(AvroSchemaError):
    """Raised when a field's xjoin.type is not one of the supported values."""


class MultiplePrimaryKeysError(AvroSchemaError):
    """Raised when more than one child of the same field is marked as the primary key."""


class MissingPrimaryKeyError(AvroSchemaError):
    """Raised when a reference field has no child marked as the primary key."""


class UnsupportedEnumerationTypeError(AvroSchemaError):
    """Raised when a field marked xjoin.enumeration has a type that cannot be enumerated."""


class SchemaDepthExceededError(AvroSchemaError):
    """Raised when the Avro schema nests deeper than the supported maximum depth."""


class GraphQLSchemaError(XJoinSubgraphError):
    """Base class for errors raised by the in-memory GraphQL schema model."""


class SchemaSerializationError(GraphQLSchemaError):
    """Raised when the GraphQL schema cannot be rendered into SDL.

    This happens when the schema has no queries, or contains an enum without values,
    a type or input without fields, or a query without a response type.
    """


class SchemaLookupError(GraphQLSchemaError):
    """Raised when a named entity does not exist in the GraphQL schema.

    Absence is treated as a programming or schema error, not as a recoverable case.
    """


class DuplicateNameError(GraphQLSchemaError):
    """Raised when an entity is added to the GraphQL schema under a name that is already taken."""


class QueryTranslationError(XJoinSubgraphError):
    """Base class for errors raised while translating a GraphQL query into a search query."""


class InvalidSelectionKindError(QueryTranslationError):
    """Raised when a selection set contains something other than plain fields, e.g. fragments."""


class UnknownFilterFieldError(QueryTranslationError):
    """Raised when a query filter references a field the corresponding filter input lacks."""


class MissingFilterClauseError(QueryTranslationError):
    """Raised when a filter value does not contain the clause its filter type requires."""


class InvalidFilterValueError(QueryTranslationError):
    """Raised when a filter clause holds a value of the wrong shape, e.g. a malformed timestamp."""


class InvalidQueryArgumentError(QueryTranslationError):
    """Raised when a query argument such as limit, offset or order_by is out of range."""


class ElasticSearchError(XJoinSubgraphError):
    """Raised when a request to Elasticsearch fails."""


class ResultWindowError(ElasticSearchError):
    """Raised when the requested page is deeper than the Elasticsearch result window allows."""


class MissingAggregationError(ElasticSearchError):
    """Raised when an aggregation response does not contain the requested field's buckets."""


class SchemaRegistryError(XJoinSubgraphError):
    """Raised when the schema registry rejects a request or cannot be reached."""


class InvalidRegistryRequestError(SchemaRegistryError):
    """Raised when a registry request is missing its schema name or schema text."""
