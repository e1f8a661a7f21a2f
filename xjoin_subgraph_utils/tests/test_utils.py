# Copyright 2022-present Kensho Technologies, LLC.
import unittest

from ..avro.utils import (
    capitalize,
    enumeration_name,
    input_name,
    order_by_enum_name,
    order_by_scalar_name,
    pluralize,
    query_name,
    type_name,
)


class NamingTests(unittest.TestCase):
    def test_capitalize(self) -> None:
        self.assertEqual("Host", capitalize("host"))
        self.assertEqual("HostTags", capitalize("hostTags"))
        self.assertEqual("", capitalize(""))

    def test_pluralize(self) -> None:
        test_data = [
            ("Host", "Hosts"),
            ("host", "hosts"),
            ("Hosts", "Hosts"),
            ("Category", "Categories"),
            ("SystemProfile", "SystemProfiles"),
            ("HOST", "HOSTS"),
            ("address", "addresses"),
            ("Process", "Processes"),
            ("class", "classes"),
            ("bus", "buses"),
            ("MailingAddress", "MailingAddresses"),
            ("ADDRESS", "ADDRESSES"),
            ("", ""),
        ]
        for word, expected_plural in test_data:
            self.assertEqual(expected_plural, pluralize(word), msg=word)

    def test_type_name(self) -> None:
        self.assertEqual("Host", type_name("host"))
        self.assertEqual("CanonicalFacts", type_name("canonical_facts"))
        self.assertEqual("SystemProfileFacts", type_name("system_profile_facts"))

    def test_derived_names(self) -> None:
        self.assertEqual("HostFilter", input_name("host"))
        self.assertEqual("OperatingSystemFilter", input_name("operating_system"))
        self.assertEqual("Hosts", query_name("host"))
        self.assertEqual("SystemProfiles", query_name("system_profile"))
        self.assertEqual("Addresses", query_name("address"))
        self.assertEqual("HostEnumeration", enumeration_name("Host"))
        self.assertEqual("HostsOrderBy", order_by_scalar_name("host"))
        self.assertEqual("HOSTS_ORDER_BY", order_by_enum_name("Host"))
