# Copyright 2022-present Kensho Technologies, LLC.
from io import StringIO
import json
import unittest
from unittest.mock import patch

from .. import tool
from ..exceptions import InvalidAvroSchemaError
from .avro_schemas import MINIMUM_VALID_AVRO_SCHEMA


class ToolTests(unittest.TestCase):
    def run_tool(self, stdin_text: str, *argv: str) -> str:
        stdout = StringIO()
        with patch("sys.stdin", StringIO(stdin_text)), patch("sys.stdout", stdout):
            tool.main(list(argv))
        return stdout.getvalue()

    def test_converts_stdin_to_sdl(self) -> None:
        sdl = self.run_tool(json.dumps(MINIMUM_VALID_AVRO_SCHEMA))
        self.assertIn('type Host @key(fields: "id") {\n  id: String\n}', sdl)
        self.assertTrue(sdl.endswith("): Hosts!\n}\n"))

    def test_invalid_schema(self) -> None:
        with self.assertRaises(InvalidAvroSchemaError):
            self.run_tool("{}")

    def test_register(self) -> None:
        with patch.object(tool, "SchemaRegistry") as schema_registry_class:
            sdl = self.run_tool(
                json.dumps(MINIMUM_VALID_AVRO_SCHEMA), "--register", "xjoin-inventory-hosts"
            )

        schema_registry = schema_registry_class.return_value
        schema_registry.register_graphql_schema.assert_called_once_with(
            "xjoin-inventory-hosts", sdl
        )

    def test_no_registration_by_default(self) -> None:
        with patch.object(tool, "SchemaRegistry") as schema_registry_class:
            self.run_tool(json.dumps(MINIMUM_VALID_AVRO_SCHEMA), "--verbose")
        schema_registry_class.assert_not_called()
