#!/usr/bin/env python
# Copyright 2022-present Kensho Technologies, LLC.
"""Utility modeled after json.tool, converts an Avro schema read from stdin to GraphQL SDL.

Used as: python -m xjoin_subgraph_utils.tool [--verbose] [--register SCHEMA_NAME]
"""
import argparse
import logging
import sys
from typing import List, Optional

from . import convert_avro_schema_to_graphql
from .config import SchemaRegistryParams
from .schema_registry import SchemaRegistry


def main(argv: Optional[List[str]] = None) -> None:
    """Read an Avro schema from standard input, and output its GraphQL SDL to standard output."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--verbose", action="store_true", help="log every generated definition")
    parser.add_argument(
        "--register",
        metavar="SCHEMA_NAME",
        help=(
            "also publish the SDL to the schema registry configured by the SCHEMA_REGISTRY_* "
            "environment variables"
        ),
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    avro_schema = sys.stdin.read()
    sdl = convert_avro_schema_to_graphql(avro_schema).to_string()

    if args.register:
        SchemaRegistry(SchemaRegistryParams.from_environment()).register_graphql_schema(
            args.register, sdl
        )

    sys.stdout.write(sdl)


if __name__ == "__main__":
    main()
