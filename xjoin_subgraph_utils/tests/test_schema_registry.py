# Copyright 2022-present Kensho Technologies, LLC.
from typing import Any
import unittest
from unittest.mock import MagicMock, call

import requests

from ..config import SchemaRegistryParams
from ..exceptions import InvalidRegistryRequestError, SchemaRegistryError
from ..schema_registry import SchemaRegistry


ARTIFACTS_URL = "http://localhost:1080/apis/registry/v2/groups/default/artifacts"

SCHEMA = 'type Host @key(fields: "id") {\n  id: String\n}\n'

GRAPHQL_HEADERS = {"Content-Type": "application/graphql", "X-Registry-ArtifactType": "GRAPHQL"}


def _make_response(status_code: int) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "Reason"
    response.url = ARTIFACTS_URL
    response._content = b"{}"
    return response


def _make_registry(*responses: Any) -> SchemaRegistry:
    session = MagicMock()
    session.request.side_effect = list(responses)
    return SchemaRegistry(SchemaRegistryParams(), session=session)


class SchemaRegistryTests(unittest.TestCase):
    def test_register_new_artifact(self) -> None:
        registry = _make_registry(_make_response(404), _make_response(200))

        registry.register_graphql_schema("xjoin-inventory-hosts", SCHEMA)

        self.assertEqual(
            [
                call(
                    "get",
                    ARTIFACTS_URL + "/xjoin-inventory-hosts",
                    data=None,
                    headers=None,
                    timeout=10.0,
                ),
                call(
                    "post",
                    ARTIFACTS_URL,
                    data=SCHEMA.encode("utf-8"),
                    headers=dict(
                        GRAPHQL_HEADERS, **{"X-Registry-ArtifactId": "xjoin-inventory-hosts"}
                    ),
                    timeout=10.0,
                ),
            ],
            registry.session.request.call_args_list,
        )

    def test_register_new_version(self) -> None:
        registry = _make_registry(_make_response(200), _make_response(200))

        registry.register_graphql_schema("xjoin-inventory-hosts", SCHEMA)

        self.assertEqual(2, registry.session.request.call_count)
        self.assertEqual(
            call(
                "post",
                ARTIFACTS_URL + "/xjoin-inventory-hosts/versions",
                data=SCHEMA.encode("utf-8"),
                headers=GRAPHQL_HEADERS,
                timeout=10.0,
            ),
            registry.session.request.call_args,
        )

    def test_artifact_created_concurrently(self) -> None:
        registry = _make_registry(_make_response(404), _make_response(409), _make_response(200))

        registry.register_graphql_schema("xjoin-inventory-hosts", SCHEMA)

        self.assertEqual(3, registry.session.request.call_count)
        self.assertEqual(
            ARTIFACTS_URL + "/xjoin-inventory-hosts/versions",
            registry.session.request.call_args[0][1],
        )

    def test_registry_rejects_request(self) -> None:
        registry = _make_registry(_make_response(404), _make_response(400))

        with self.assertRaises(SchemaRegistryError) as context:
            registry.register_graphql_schema("xjoin-inventory-hosts", SCHEMA)
        self.assertTrue(
            str(context.exception).startswith(
                "Failed to create artifact xjoin-inventory-hosts: 400 Client Error"
            )
        )

    def test_failed_lookup(self) -> None:
        registry = _make_registry(_make_response(500))

        with self.assertRaises(SchemaRegistryError) as context:
            registry.register_graphql_schema("xjoin-inventory-hosts", SCHEMA)
        self.assertTrue(
            str(context.exception).startswith(
                "Failed to look up artifact xjoin-inventory-hosts: 500 Server Error"
            )
        )

    def test_registry_unreachable(self) -> None:
        registry = _make_registry(requests.ConnectionError("connection refused"))

        with self.assertRaises(SchemaRegistryError) as context:
            registry.register_graphql_schema("xjoin-inventory-hosts", SCHEMA)
        self.assertEqual(
            "Failed to look up artifact xjoin-inventory-hosts: connection refused",
            str(context.exception),
        )

    def test_invalid_requests(self) -> None:
        registry = _make_registry()

        with self.assertRaises(InvalidRegistryRequestError):
            registry.register_graphql_schema("", SCHEMA)
        with self.assertRaises(InvalidRegistryRequestError):
            registry.register_graphql_schema("xjoin-inventory-hosts", "")
        registry.session.request.assert_not_called()

    def test_artifacts_url(self) -> None:
        registry = SchemaRegistry(
            SchemaRegistryParams(protocol="https", hostname="registry", port="8443"),
            session=MagicMock(),
        )
        self.assertEqual(
            "https://registry:8443/apis/registry/v2/groups/default/artifacts",
            registry.artifacts_url,
        )
