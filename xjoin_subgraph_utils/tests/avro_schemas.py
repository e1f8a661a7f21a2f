# Copyright 2022-present Kensho Technologies, LLC.
"""Avro schemas shared by the tests, in their decoded JSON form."""
import copy
from typing import Any, Dict


def string_type(**attributes: Any) -> Dict[str, Any]:
    """Return a string type object with xjoin.type=string and the given extra attributes."""
    type_object = {"type": "string", "xjoin.type": "string"}
    type_object.update(attributes)
    return type_object


def make_avro_schema(*fields: Dict[str, Any]) -> Dict[str, Any]:
    """Return a valid Avro schema whose "host" root field has the given children."""
    return {
        "type": "record",
        "name": "Value",
        "namespace": "hosts",
        "fields": [
            {
                "name": "host",
                "type": {"type": "record", "xjoin.type": "reference", "fields": list(fields)},
            }
        ],
    }


MINIMUM_VALID_AVRO_SCHEMA = make_avro_schema(
    {"name": "id", "type": string_type(**{"xjoin.primary.key": True})}
)


HOST_AVRO_SCHEMA = make_avro_schema(
    {"name": "id", "type": string_type(**{"xjoin.primary.key": True})},
    {"name": "account", "type": ["null", string_type(**{"xjoin.enumeration": True})]},
    {"name": "display_name", "type": "string", "xjoin.type": "string"},
    {"name": "created_on", "type": {"type": "string", "xjoin.type": "date_nanos"}},
    {"name": "stale", "type": {"type": "boolean", "xjoin.type": "boolean"}},
    {"name": "tags", "type": {"type": "string", "xjoin.type": "json"}},
    {
        "name": "canonical_facts",
        "type": {
            "type": "record",
            "xjoin.type": "json",
            "fields": [
                {"name": "fqdn", "type": string_type()},
                {"name": "insights_id", "type": string_type()},
            ],
        },
    },
    {
        "name": "system_profile_facts",
        "type": {
            "type": "record",
            "xjoin.type": "json",
            "fields": [
                {"name": "arch", "type": string_type(**{"xjoin.enumeration": True})},
                {
                    "name": "operating_system",
                    "type": {
                        "type": "record",
                        "xjoin.type": "json",
                        "fields": [
                            {"name": "major", "type": string_type()},
                            {"name": "minor", "type": string_type()},
                            {"name": "name", "type": string_type()},
                        ],
                    },
                },
            ],
        },
    },
    {"name": "ansible_host", "type": string_type(), "xjoin.index": False},
)


def get_host_avro_schema() -> Dict[str, Any]:
    """Return a copy of the host schema that tests are free to modify."""
    return copy.deepcopy(HOST_AVRO_SCHEMA)
