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

import logging
import traceback
from typing import List, Union

import yaml
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from gemara_mcp_server.client.schema_registry import (
    SchemaRegistry,
    normalize_definition,
)
from gemara_mcp_server.utils.common import ToolError, ValidationOutcome
from gemara_mcp_server.utils.constants import TRACEBACK_LIMIT, VALIDATE_ARTIFACT_TOOL
from gemara_mcp_server.utils.exceptions import (
    ArtifactInputError,
    GemaraMCPError,
    SchemaResolutionError,
)

# Logger for this module
logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class ArtifactLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates as strings so artifacts stay JSON compatible."""


ArtifactLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _error_lines(text: str) -> List[str]:
    return [line for line in text.strip().split("\n") if line.strip()]


async def validate_artifact(
    artifact_content: str, definition: str, schema_registry: SchemaRegistry
) -> ValidationOutcome:
    """
    Validate YAML artifact content against a named schema definition.

    A document that does not parse or does not satisfy the definition is a
    normal result with ``valid=False``. Only missing inputs and schema loading
    problems raise.

    :param artifact_content: YAML content of the artifact
    :param definition: Definition name, with or without the leading ``#``
    :param schema_registry: Registry providing the definition's validator

    :returns: The validation outcome
    :raises ArtifactInputError: If either input is empty
    :raises SchemaResolutionError: If the schema module or definition cannot be loaded
    """
    if not artifact_content:
        raise ArtifactInputError("artifact_content is required")
    if not definition:
        raise ArtifactInputError("definition is required")

    definition = normalize_definition(definition)

    try:
        data = yaml.load(artifact_content, Loader=ArtifactLoader)
    except yaml.YAMLError as e:
        return ValidationOutcome(
            valid=False,
            errors=[f"Failed to parse YAML: {e}"],
            message=f"Validation failed: invalid YAML: {e}",
        )

    validator = await schema_registry.get_validator(definition)

    violations = sorted(
        validator.iter_errors(data),
        key=lambda error: [str(part) for part in error.absolute_path],
    )
    if violations:
        errors = []
        for violation in violations:
            errors.extend(_error_lines(f"{violation.json_path}: {violation.message}"))
        logger.debug(
            "Artifact failed %s with %d violation(s)", definition, len(violations)
        )
        return ValidationOutcome(
            valid=False,
            errors=errors,
            message=f"Validation failed: artifact does not satisfy {definition} "
            f"({len(violations)} error(s))",
        )

    return ValidationOutcome(valid=True, errors=[], message="Artifact is valid")


async def validate_artifact_tool(
    schema_registry: SchemaRegistry, artifact_content: str, definition: str
) -> Union[ValidationOutcome, ToolError]:
    """
    Validates an artifact, mapping function errors to a ToolError.

    Args:
        schema_registry: Registry providing schema definitions
        artifact_content: YAML content of the artifact
        definition: Definition name to validate against

    Returns:
        The validation outcome, or a ToolError if validation could not run
    """
    method_name = "validate_gemara_artifact"
    try:
        return await validate_artifact(artifact_content, definition, schema_registry)
    except ArtifactInputError as e:
        return ToolError(
            message=str(e),
            suggestions=[
                "Provide the artifact YAML in artifact_content",
                "Provide a definition name such as '#ControlCatalog'",
            ],
        )
    except GemaraMCPError as e:
        error_traceback = traceback.format_exc(limit=TRACEBACK_LIMIT)
        logger.error(
            f"{method_name} failed: {e.__class__.__name__} - {str(e)}\n{error_traceback}"
        )
        suggestions = ["Check network connectivity to the schema registry"]
        if isinstance(e, SchemaResolutionError):
            suggestions = [
                "Verify the definition name exists in the Gemara schema",
                "Check network connectivity to the schema registry",
            ]
        return ToolError(message=str(e), suggestions=suggestions)


def register_validation_tools(mcp: FastMCP, schema_registry: SchemaRegistry) -> None:

    @mcp.tool(
        name=VALIDATE_ARTIFACT_TOOL,
        annotations=ToolAnnotations(readOnlyHint=True),
    )
    async def validate_gemara_artifact(
        artifact_content: str,
        definition: str,
    ) -> Union[ValidationOutcome, ToolError]:
        """
        Validate a Gemara artifact YAML content against the Gemara schema from the schema registry module.

        The artifact is never modified. A malformed or non-conforming artifact is
        reported with valid set to false and one error line per problem.

        :param artifact_content: YAML content of the Gemara artifact to validate
        :param definition: Schema definition name to validate against
                (e.g., '#ControlCatalog', '#GuidanceDocument', '#Policy', '#EvaluationLog').
                The leading '#' is added when missing.

        :returns: A dictionary with the following structure:
                - valid: Whether the artifact satisfies the definition
                - errors: List of validation error lines, empty when valid
                - message: Summary of the outcome

                Returns ToolError if an input is missing or the schema could not be loaded.
                The ToolError is the tool result itself, so check its isError field
                rather than the protocol-level error flag.
        """
        return await validate_artifact_tool(
            schema_registry, artifact_content, definition
        )
