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
Constants used across the MCP server tools.

This module centralizes magic numbers and string literals to improve
maintainability and reduce duplication across the codebase.

Constants are organized by category for easy navigation and maintenance.
"""

# ============================================================================
# LEXICON SOURCE
# ============================================================================

LEXICON_URL = "https://raw.githubusercontent.com/gemaraproj/gemara/main/docs/lexicon.yaml"
"""Remote YAML document holding the Gemara Lexicon."""

LEXICON_CACHE_TTL = 24 * 60 * 60
"""Seconds a fetched lexicon stays fresh. The lexicon changes infrequently."""


# ============================================================================
# LEXICON RESOURCE
# ============================================================================

LEXICON_RESOURCE_URI = "https://gemara.openssf.org/model/02-definitions"
"""Canonical resource URI for the lexicon."""

LEXICON_RESOURCE_URI_ALIAS = "gemara://lexicon"
"""Short alias resource URI for the lexicon."""

LEXICON_RESOURCE_NAME = "lexicon"

LEXICON_RESOURCE_DESCRIPTION = (
    "The Gemara Lexicon containing definitions of terms used in the Gemara framework."
)

LEXICON_MIME_TYPE = "application/json"


# ============================================================================
# TOOL NAMES
# ============================================================================

GET_LEXICON_TOOL = "get_lexicon"

VALIDATE_ARTIFACT_TOOL = "validate_gemara_artifact"


# ============================================================================
# SCHEMA MODULE
# ============================================================================

GEMARA_MODULE_PATH = "github.com/gemaraproj/gemara@latest"
"""Module coordinate of the Gemara schema definitions."""

SCHEMA_BUNDLE_PATH = "schemas/gemara.schema.json"
"""Path of the JSON Schema bundle inside the module repository."""

LATEST_VERSION_REF = "main"
"""Git ref used when the module version is ``latest``."""

DEFINITION_PREFIX = "#"
"""Marker prepended to schema definition names."""


# ============================================================================
# CONNECTION SETTINGS
# ============================================================================

DEFAULT_REQUEST_TIMEOUT = 30.0
"""Total deadline in seconds for a single HTTP request."""


# ============================================================================
# ERROR HANDLING
# ============================================================================

TRACEBACK_LIMIT = 3
"""Maximum number of traceback frames to include in error logs."""
