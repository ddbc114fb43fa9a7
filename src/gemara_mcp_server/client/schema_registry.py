# Copyright contributors to the Gemara MCP Server project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Schema module registry for artifact validation.

A schema module is identified by a coordinate such as
``github.com/gemaraproj/gemara@latest``. The module is consumed as a JSON
Schema bundle whose named definitions live under ``$defs`` (or the older
``definitions`` keyword). The bundle is loaded once per process and each
definition is turned into a ``jsonschema`` validator on request.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp
from jsonschema import exceptions as jsonschema_exceptions
from jsonschema import validators as jsonschema_validators

from gemara_mcp_server.client.http_client import HTTPClient
from gemara_mcp_server.utils.constants import (
    DEFINITION_PREFIX,
    GEMARA_MODULE_PATH,
    LATEST_VERSION_REF,
    SCHEMA_BUNDLE_PATH,
)
from gemara_mcp_server.utils.exceptions import SchemaResolutionError

# Logger for this module
logger = logging.getLogger(__name__)

DEFINITION_KEYWORDS = ("$defs", "definitions")

# Root keywords kept when a definition is validated on its own, so that
# references between definitions still resolve inside the bundle.
_ROOT_KEYWORDS = ("$schema", "$id") + DEFINITION_KEYWORDS


def resolve_module_url(module_path: str) -> str:
    """
    Resolve a module coordinate to the URL of its schema bundle.

    ``github.com/<owner>/<repo>@<version>`` maps to the raw content of
    :data:`SCHEMA_BUNDLE_PATH` at ``<version>``; ``latest`` maps to the main branch.

    :raises SchemaResolutionError: If the coordinate is not a GitHub module path
    """
    path, _, version = module_path.partition("@")
    parts = path.strip("/").split("/")
    if len(parts) != 3 or parts[0] != "github.com" or not all(parts):
        raise SchemaResolutionError(
            f"failed to load module: unsupported module path {module_path!r}"
        )
    ref = version if version and version != "latest" else LATEST_VERSION_REF
    _, owner, repo = parts
    return f"https://raw.githubusercontent.com/{owner}/{repo}/{ref}/{SCHEMA_BUNDLE_PATH}"


def normalize_definition(definition: str) -> str:
    """Return ``definition`` with the leading ``#`` marker, adding it if absent."""
    if not definition.startswith(DEFINITION_PREFIX):
        definition = DEFINITION_PREFIX + definition
    return definition


class SchemaRegistry:
    """
    Loads a schema module and hands out validators for its definitions.

    The module document is fetched on first use and kept for the lifetime of
    the registry. A failed load is not remembered, so the next call retries.
    """

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        module_path: str = GEMARA_MODULE_PATH,
        schema_url: Optional[str] = None,
        schema_document: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            http_client: Client used to download the module bundle
            module_path: Module coordinate to resolve when ``schema_url`` is not given
            schema_url: Explicit bundle URL, overriding the resolved coordinate
            schema_document: Already loaded bundle; no download happens when set
        """
        self.http_client = http_client
        self.module_path = module_path
        self.schema_url = schema_url
        self._document = schema_document
        self._lock = asyncio.Lock()

    async def load_module(self) -> Dict[str, Any]:
        """
        Return the schema bundle, downloading it on first use.

        :raises SchemaResolutionError: If the bundle cannot be fetched or is not a JSON object
        """
        if self._document is not None:
            return self._document

        async with self._lock:
            if self._document is not None:
                return self._document

            if self.http_client is None:
                raise SchemaResolutionError(
                    "failed to load module: no HTTP client configured"
                )

            url = self.schema_url or resolve_module_url(self.module_path)
            logger.info("Loading schema module %s from %s", self.module_path, url)
            try:
                status, body = await self.http_client.get(url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise SchemaResolutionError(f"failed to load module: {e}") from e
            if status != 200:
                raise SchemaResolutionError(
                    f"failed to load module: unexpected status code: {status}"
                )

            try:
                document = json.loads(body)
            except ValueError as e:
                raise SchemaResolutionError(f"failed to build schema: {e}") from e
            if not isinstance(document, dict):
                raise SchemaResolutionError(
                    "failed to build schema: module is not a JSON object"
                )

            self._document = document
            return document

    async def get_validator(self, definition: str):
        """
        Build a validator for one named definition of the module.

        :param definition: Definition name, with or without the leading ``#``
        :returns: A ``jsonschema`` validator instance for the definition
        :raises SchemaResolutionError: If the module cannot be loaded, the
            definition does not exist, or the schema itself is invalid
        """
        document = await self.load_module()
        definition = normalize_definition(definition)
        name = definition[len(DEFINITION_PREFIX) :]

        for keyword in DEFINITION_KEYWORDS:
            if name in document.get(keyword, {}):
                break
        else:
            raise SchemaResolutionError(f"definition {definition} not found in schema")

        entrypoint = {key: document[key] for key in _ROOT_KEYWORDS if key in document}
        entrypoint["$ref"] = f"#/{keyword}/{name}"

        validator_cls = jsonschema_validators.validator_for(document)
        try:
            validator_cls.check_schema(entrypoint)
        except jsonschema_exceptions.SchemaError as e:
            raise SchemaResolutionError(f"failed to build schema: {e.message}") from e
        return validator_cls(entrypoint)
