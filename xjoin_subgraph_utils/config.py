# Copyright 2022-present Kensho Technologies, LLC.
"""Connection settings for the schema registry and Elasticsearch, read from the environment."""
from dataclasses import dataclass
import os
from typing import Mapping, Optional

from .exceptions import ConfigurationError


DEFAULT_TIMEOUT_SECONDS = 10.0


def _get_timeout(environ: Mapping[str, str], key: str) -> float:
    value = environ.get(key)
    if not value:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(value)
    except ValueError as e:
        raise ConfigurationError(
            "Expected {} to be a number of seconds, but got {!r}.".format(key, value)
        ) from e
    if timeout <= 0:
        raise ConfigurationError("Expected {} to be positive, but got {!r}.".format(key, value))
    return timeout


@dataclass(frozen=True)
class SchemaRegistryParams:
    """Location of the Apicurio schema registry the generated GraphQL schema is published to."""

    protocol: str = "http"
    hostname: str = "localhost"
    port: str = "1080"
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def base_url(self) -> str:
        return "{}://{}:{}".format(self.protocol, self.hostname, self.port)

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "SchemaRegistryParams":
        """Read SCHEMA_REGISTRY_PROTOCOL, SCHEMA_REGISTRY_HOSTNAME and SCHEMA_REGISTRY_PORT."""
        if environ is None:
            environ = os.environ

        port = environ.get("SCHEMA_REGISTRY_PORT") or cls.port
        if not port.isdigit():
            raise ConfigurationError(
                "Expected SCHEMA_REGISTRY_PORT to be a port number, but got {!r}.".format(port)
            )

        return cls(
            protocol=environ.get("SCHEMA_REGISTRY_PROTOCOL") or cls.protocol,
            hostname=environ.get("SCHEMA_REGISTRY_HOSTNAME") or cls.hostname,
            port=port,
            timeout=_get_timeout(environ, "SCHEMA_REGISTRY_TIMEOUT"),
        )


@dataclass(frozen=True)
class ElasticSearchConnection:
    """Elasticsearch cluster and index holding the documents described by the Avro schema."""

    url: str
    index: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ElasticSearchConnection":
        """Read ELASTIC_SEARCH_URL and ELASTIC_SEARCH_INDEX, plus the optional credentials."""
        if environ is None:
            environ = os.environ

        url = environ.get("ELASTIC_SEARCH_URL")
        if not url:
            raise ConfigurationError("ELASTIC_SEARCH_URL must be set to connect to Elasticsearch.")
        index = environ.get("ELASTIC_SEARCH_INDEX")
        if not index:
            raise ConfigurationError(
                "ELASTIC_SEARCH_INDEX must be set to connect to Elasticsearch."
            )

        return cls(
            url=url,
            index=index,
            username=environ.get("ELASTIC_SEARCH_USERNAME") or None,
            password=environ.get("ELASTIC_SEARCH_PASSWORD") or None,
            timeout=_get_timeout(environ, "ELASTIC_SEARCH_TIMEOUT"),
        )
