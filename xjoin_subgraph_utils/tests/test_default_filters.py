# Copyright 2022-present Kensho Technologies, LLC.
import unittest

from ..exceptions import InvalidFilterValueError, MissingFilterClauseError, SchemaLookupError
from ..graphql_schema.default_filters import (
    DefaultFilters,
    boolean_filter,
    enumeration_filter,
    int_filter,
    range_filter,
    string_array_filter,
    string_filter,
    timestamp_filter,
)


class FilterBuilderTests(unittest.TestCase):
    def test_range_filter(self) -> None:
        self.assertEqual(
            {"range": {"host.count": {"gt": 1, "lte": 10}}},
            range_filter("count", {"gt": 1, "lte": 10, "lt": None}, "host"),
        )
        self.assertEqual({"term": {"host.count": 3}}, range_filter("count", {"eq": 3}, "host"))
        self.assertEqual({"range": {"host.count": {}}}, range_filter("count", {}, "host"))

    def test_field_path_uses_lowercase_root(self) -> None:
        self.assertEqual(
            {"term": {"host.canonical_facts.fqdn": "example.com"}},
            string_filter("fqdn", {"eq": "example.com"}, "Host.Canonical_Facts"),
        )

    def test_int_filter(self) -> None:
        self.assertEqual(
            {"range": {"host.cores": {"gte": 2, "lt": 8}}},
            int_filter("cores", {"gte": 2, "lt": 8}, "host"),
        )

        for invalid_value in ("2", 2.5, True):
            with self.assertRaises(InvalidFilterValueError):
                int_filter("cores", {"gte": invalid_value}, "host")

    def test_timestamp_filter(self) -> None:
        self.assertEqual(
            {
                "range": {
                    "host.created_on": {
                        "lt": "2022-02-01T00:00:00Z",
                        "gte": "2022-01-01T00:00:00.000000+00:00",
                    }
                }
            },
            timestamp_filter(
                "created_on",
                {"gte": "2022-01-01T00:00:00.000000+00:00", "lt": "2022-02-01T00:00:00Z"},
                "host",
            ),
        )
        self.assertEqual(
            {"term": {"host.created_on": "2022-01-01"}},
            timestamp_filter("created_on", {"eq": "2022-01-01"}, "host"),
        )

        for invalid_value in ("yesterday", "2022-13-45", 20220101):
            with self.assertRaises(InvalidFilterValueError):
                timestamp_filter("created_on", {"lt": invalid_value}, "host")

    def test_string_filter(self) -> None:
        self.assertEqual({"term": {"host.id": "abc"}}, string_filter("id", {"eq": "abc"}, "host"))

        with self.assertRaises(MissingFilterClauseError) as context:
            string_filter("id", {}, "host")
        self.assertEqual("string filter must contain an eq clause: id", str(context.exception))

    def test_boolean_filter(self) -> None:
        self.assertEqual(
            {"term": {"host.stale": False}}, boolean_filter("stale", {"is": False}, "host")
        )

        with self.assertRaises(MissingFilterClauseError) as context:
            boolean_filter("stale", {"is": None}, "host")
        self.assertEqual("boolean filter must contain an is clause: stale", str(context.exception))

    def test_string_array_filter(self) -> None:
        self.assertEqual(
            {
                "terms_set": {
                    "host.tags": {
                        "terms": ["a", "b"],
                        "minimum_should_match_script": {"source": "params.num_terms"},
                    }
                }
            },
            string_array_filter("tags", {"contains_all": ["a", "b"]}, "host"),
        )
        self.assertEqual(
            {"terms": {"host.tags": ["a", "b"]}},
            string_array_filter("tags", {"contains_any": ["a", "b"]}, "host"),
        )

        with self.assertRaises(MissingFilterClauseError) as context:
            string_array_filter("tags", {}, "host")
        self.assertEqual(
            "string array filter must contain one of [contains_all, contains_any]: tags",
            str(context.exception),
        )

    def test_enumeration_filter_has_no_clause(self) -> None:
        self.assertEqual({}, enumeration_filter("account", {"search": {"eq": "a"}}, "host"))

    def test_filter_value_must_be_an_object(self) -> None:
        for filter_builder in (
            range_filter,
            int_filter,
            timestamp_filter,
            string_filter,
            boolean_filter,
            string_array_filter,
        ):
            with self.assertRaises(InvalidFilterValueError):
                filter_builder("id", "abc", "host")  # type: ignore[arg-type]


class DefaultFiltersTests(unittest.TestCase):
    def test_catalog(self) -> None:
        default_filters = DefaultFilters()

        self.assertEqual(
            [
                "FilterTimestamp",
                "FilterInt",
                "FilterString",
                "FilterStringArray",
                "FilterBoolean",
                "EnumerationFilter",
            ],
            [default_filter.name for default_filter in default_filters.filters],
        )
        for default_filter in default_filters.filters:
            self.assertEqual(default_filter.name, default_filter.input.name)

        timestamp_input = default_filters.get_filter("FilterTimestamp").input
        self.assertEqual(
            ["lt", "lte", "gt", "gte", "eq"],
            [input_field.name for input_field in timestamp_input.fields],
        )
        self.assertIs(string_filter, default_filters.get_filter("FilterString").build_es_filter)

    def test_lookup(self) -> None:
        default_filters = DefaultFilters()
        self.assertTrue(default_filters.has_filter("FilterBoolean"))
        self.assertFalse(default_filters.has_filter("HostFilter"))

        with self.assertRaises(SchemaLookupError) as context:
            default_filters.get_filter("HostFilter")
        self.assertEqual("unable to locate filter: HostFilter", str(context.exception))
