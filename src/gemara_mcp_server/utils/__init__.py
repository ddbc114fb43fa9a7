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
Utilities module for MCP servers.

This module provides common models, exceptions and constants.
"""

from .common import (
    ToolError,
    LexiconEntry,
    LexiconOutput,
    LexiconResourceContents,
    FetchOutcome,
    ValidationOutcome,
)
from .exceptions import (
    GemaraMCPError,
    LexiconFetchError,
    LexiconRequestError,
    LexiconStatusError,
    LexiconDecodeError,
    ArtifactInputError,
    SchemaResolutionError,
)

# Import commonly used constants for convenience
from .constants import (
    LEXICON_URL,
    LEXICON_CACHE_TTL,
    LEXICON_RESOURCE_URI,
    LEXICON_RESOURCE_URI_ALIAS,
    LEXICON_MIME_TYPE,
    GEMARA_MODULE_PATH,
    DEFAULT_REQUEST_TIMEOUT,
    TRACEBACK_LIMIT,
)

__all__ = [
    "ToolError",
    "LexiconEntry",
    "LexiconOutput",
    "LexiconResourceContents",
    "FetchOutcome",
    "ValidationOutcome",
    "GemaraMCPError",
    "LexiconFetchError",
    "LexiconRequestError",
    "LexiconStatusError",
    "LexiconDecodeError",
    "ArtifactInputError",
    "SchemaResolutionError",
    # Constants
    "LEXICON_URL",
    "LEXICON_CACHE_TTL",
    "LEXICON_RESOURCE_URI",
    "LEXICON_RESOURCE_URI_ALIAS",
    "LEXICON_MIME_TYPE",
    "GEMARA_MODULE_PATH",
    "DEFAULT_REQUEST_TIMEOUT",
    "TRACEBACK_LIMIT",
]
