# Copyright 2022-present Kensho Technologies, LLC.
"""Client publishing generated GraphQL schemas to an Apicurio schema registry."""
import logging
from typing import Dict, Optional, Tuple

import requests

from .config import SchemaRegistryParams
from .exceptions import InvalidRegistryRequestError, SchemaRegistryError


logger = logging.getLogger(__name__)

ARTIFACTS_PATH = "apis/registry/v2/groups/default/artifacts"

GRAPHQL_ARTIFACT_HEADERS = {
    "Content-Type": "application/graphql",
    "X-Registry-ArtifactType": "GRAPHQL",
}


class SchemaRegistry:
    """Register GraphQL schemas as versioned artifacts of the registry's default group."""

    def __init__(
        self, params: SchemaRegistryParams, session: Optional[requests.Session] = None
    ) -> None:
        self.params = params
        if session is None:
            session = requests.Session()
        self.session = session

    @property
    def artifacts_url(self) -> str:
        return "{}/{}".format(self.params.base_url, ARTIFACTS_PATH)

    def register_graphql_schema(self, schema_name: str, schema: str) -> None:
        """Publish the schema, as a new artifact or as a new version of the existing one.

        Args:
            schema_name: id of the artifact in the registry
            schema: GraphQL SDL to publish

        Raises:
            InvalidRegistryRequestError if the name or the schema is empty, before any request
            is made, and SchemaRegistryError if the registry rejects a request or is unreachable
        """
        if not schema_name:
            raise InvalidRegistryRequestError("schema_name is required to register a schema")
        if not schema:
            raise InvalidRegistryRequestError(
                "schema is required to register schema {}".format(schema_name)
            )

        if self._artifact_exists(schema_name):
            self._create_version(schema_name, schema)
            return

        response = self._request(
            "create artifact {}".format(schema_name),
            "post",
            self.artifacts_url,
            schema,
            dict(GRAPHQL_ARTIFACT_HEADERS, **{"X-Registry-ArtifactId": schema_name}),
            allowed_statuses=(requests.codes.conflict,),
        )
        if response.status_code == requests.codes.conflict:
            # Created concurrently since the existence check.
            logger.info("Artifact %s already exists, adding a new version instead", schema_name)
            self._create_version(schema_name, schema)
        else:
            logger.info("Registered GraphQL schema %s", schema_name)

    def _artifact_exists(self, schema_name: str) -> bool:
        response = self._request(
            "look up artifact {}".format(schema_name),
            "get",
            "{}/{}".format(self.artifacts_url, schema_name),
            allowed_statuses=(requests.codes.not_found,),
        )
        return response.status_code != requests.codes.not_found

    def _create_version(self, schema_name: str, schema: str) -> None:
        self._request(
            "update artifact {}".format(schema_name),
            "post",
            "{}/{}/versions".format(self.artifacts_url, schema_name),
            schema,
            GRAPHQL_ARTIFACT_HEADERS,
        )
        logger.info("Registered new version of GraphQL schema %s", schema_name)

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        allowed_statuses: Tuple[int, ...] = (),
    ) -> requests.Response:
        """Send a request, raising SchemaRegistryError unless its status is a success or allowed."""
        logger.debug("Schema registry request to %s: %s %s", operation, method.upper(), url)
        try:
            response = self.session.request(
                method,
                url,
                data=body.encode("utf-8") if body is not None else None,
                headers=headers,
                timeout=self.params.timeout,
            )
            logger.debug("Schema registry responded with status %s", response.status_code)
            if response.status_code not in allowed_statuses:
                response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Schema registry failed to %s: %s", operation, e)
            raise SchemaRegistryError("Failed to {}: {}".format(operation, e)) from e
        return response
