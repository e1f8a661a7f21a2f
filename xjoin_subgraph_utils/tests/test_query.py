# Copyright 2022-present Kensho Technologies, LLC.
from typing import Tuple
import unittest

from graphql import parse
from graphql.language.ast import SelectionNode

from .. import convert_avro_schema_to_graphql
from ..exceptions import (
    InvalidFilterValueError,
    InvalidQueryArgumentError,
    InvalidSelectionKindError,
    UnknownFilterFieldError,
)
from ..graphql_schema.query import (
    graphql_filters_to_es_filters,
    graphql_selection_to_es_source_fields,
    validate_order_by_field,
)
from .avro_schemas import HOST_AVRO_SCHEMA


def _get_data_selections(query: str) -> Tuple[SelectionNode, ...]:
    """Return the selections made on the items of the first root field of the query."""
    operation = parse(query).definitions[0]
    root_selection = operation.selection_set.selections[0]
    data_selection = root_selection.selection_set.selections[0]
    return tuple(data_selection.selection_set.selections)


class SelectionTranslationTests(unittest.TestCase):
    def test_leaf_and_nested_selections(self) -> None:
        selections = _get_data_selections(
            """{
                Hosts {
                    data {
                        id
                        display_name
                        canonical_facts {
                            fqdn
                        }
                        system_profile_facts {
                            operating_system {
                                major
                                minor
                            }
                        }
                    }
                }
            }"""
        )
        self.assertEqual(
            [
                "host.id",
                "host.display_name",
                "host.canonical_facts.fqdn",
                "host.system_profile_facts.operating_system.major",
                "host.system_profile_facts.operating_system.minor",
            ],
            graphql_selection_to_es_source_fields(["host"], selections),
        )

    def test_no_selections(self) -> None:
        self.assertEqual([], graphql_selection_to_es_source_fields(["host"], []))

    def test_fragments_are_not_supported(self) -> None:
        test_data = [
            (
                "{ Hosts { data { ...HostFields } } } fragment HostFields on Host { id }",
                "invalid selection kind: fragment_spread",
            ),
            (
                "{ Hosts { data { ... on Host { id } } } }",
                "invalid selection kind: inline_fragment",
            ),
        ]
        for query, expected_message in test_data:
            with self.assertRaises(InvalidSelectionKindError) as context:
                graphql_selection_to_es_source_fields(["host"], _get_data_selections(query))
            self.assertEqual(expected_message, str(context.exception))


class FilterTranslationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.schema = convert_avro_schema_to_graphql(HOST_AVRO_SCHEMA)

    def test_default_filter(self) -> None:
        self.assertEqual(
            [{"term": {"host.id": "test"}}],
            graphql_filters_to_es_filters(["host"], {"id": {"eq": "test"}}, self.schema),
        )

    def test_multiple_filters_keep_their_order(self) -> None:
        query_filters = {
            "stale": {"is": True},
            "created_on": {"gte": "2022-01-01T00:00:00Z"},
            "account": {"eq": "000001"},
        }
        self.assertEqual(
            [
                {"term": {"host.stale": True}},
                {"range": {"host.created_on": {"gte": "2022-01-01T00:00:00Z"}}},
                {"term": {"host.account": "000001"}},
            ],
            graphql_filters_to_es_filters(["host"], query_filters, self.schema),
        )

    def test_nested_filters(self) -> None:
        query_filters = {
            "canonical_facts": {"fqdn": {"eq": "example.com"}},
            "system_profile_facts": {
                "arch": {"eq": "x86_64"},
                "operating_system": {"major": {"eq": "8"}},
            },
        }
        self.assertEqual(
            [
                {"term": {"host.canonical_facts.fqdn": "example.com"}},
                {"term": {"host.system_profile_facts.arch": "x86_64"}},
                {"term": {"host.system_profile_facts.operating_system.major": "8"}},
            ],
            graphql_filters_to_es_filters(["host"], query_filters, self.schema),
        )

    def test_missing_filters(self) -> None:
        self.assertEqual([], graphql_filters_to_es_filters(["host"], None, self.schema))
        self.assertEqual([], graphql_filters_to_es_filters(["host"], {}, self.schema))
        self.assertEqual(
            [], graphql_filters_to_es_filters(["host"], {"canonical_facts": None}, self.schema)
        )

    def test_unknown_filter_field(self) -> None:
        with self.assertRaises(UnknownFilterFieldError) as context:
            graphql_filters_to_es_filters(["host"], {"ansible_host": {"eq": "a"}}, self.schema)
        self.assertEqual(
            "unable to find field: ansible_host on GraphQLInput HostFilter", str(context.exception)
        )

        # Fields without a filter input, such as free-form JSON, cannot be filtered on.
        with self.assertRaises(UnknownFilterFieldError):
            graphql_filters_to_es_filters(["host"], {"tags": {"eq": "a"}}, self.schema)

    def test_invalid_filter_value(self) -> None:
        with self.assertRaises(InvalidFilterValueError):
            graphql_filters_to_es_filters(["host"], ["id"], self.schema)  # type: ignore[arg-type]
        with self.assertRaises(InvalidFilterValueError):
            graphql_filters_to_es_filters(
                ["host"], {"canonical_facts": "example.com"}, self.schema
            )

    def test_empty_parent(self) -> None:
        with self.assertRaises(AssertionError):
            graphql_filters_to_es_filters([], {"id": {"eq": "test"}}, self.schema)


class OrderByValidationTests(unittest.TestCase):
    def test_valid_order_by_fields(self) -> None:
        schema = convert_avro_schema_to_graphql(HOST_AVRO_SCHEMA)
        for order_by in ("id", "display_name", "canonical_facts.fqdn"):
            self.assertEqual(order_by, validate_order_by_field(schema, order_by))

    def test_invalid_order_by_fields(self) -> None:
        schema = convert_avro_schema_to_graphql(HOST_AVRO_SCHEMA)
        for order_by in ("tags", "fqdn", "host.id", ""):
            with self.assertRaises(InvalidQueryArgumentError) as context:
                validate_order_by_field(schema, order_by)
            self.assertIn(
                "Results of Hosts can be ordered by: canonical_facts.fqdn", str(context.exception)
            )
