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
from typing import Union

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from gemara_mcp_server.cache.lexicon_loader import LexiconService
from gemara_mcp_server.utils.common import LexiconOutput, ToolError
from gemara_mcp_server.utils.constants import (
    GET_LEXICON_TOOL,
    LEXICON_MIME_TYPE,
    LEXICON_RESOURCE_DESCRIPTION,
    LEXICON_RESOURCE_NAME,
    LEXICON_RESOURCE_URI,
    LEXICON_RESOURCE_URI_ALIAS,
    TRACEBACK_LIMIT,
)
from gemara_mcp_server.utils.exceptions import (
    LexiconDecodeError,
    LexiconFetchError,
    LexiconStatusError,
)

# Logger for this module
logger = logging.getLogger(__name__)


async def get_lexicon_tool(
    lexicon_service: LexiconService, refresh: bool = False
) -> Union[LexiconOutput, ToolError]:
    """
    Retrieves the lexicon, mapping fetch failures to a ToolError.

    Args:
        lexicon_service: The service serving the cached lexicon
        refresh: Bypass the cache and fetch the lexicon again

    Returns:
        The lexicon output, or a ToolError if the lexicon could not be fetched
    """
    method_name = "get_lexicon"
    try:
        return await lexicon_service.get_lexicon(refresh=refresh)
    except LexiconFetchError as e:
        error_traceback = traceback.format_exc(limit=TRACEBACK_LIMIT)
        logger.error(
            f"{method_name} failed: {e.__class__.__name__} - {str(e)}\n{error_traceback}"
        )
        if isinstance(e, LexiconStatusError):
            suggestions = [
                f"The lexicon source answered with HTTP {e.status_code}",
                "Retry later",
            ]
        elif isinstance(e, LexiconDecodeError):
            suggestions = ["Verify the lexicon source serves a YAML list of terms"]
        else:
            suggestions = [
                "Check network connectivity",
                "Verify the lexicon URL is reachable",
            ]
        return ToolError(
            message=f"Error retrieving lexicon: {str(e)}",
            suggestions=suggestions,
        )


def register_lexicon_tools(mcp: FastMCP, lexicon_service: LexiconService) -> None:
    """
    Register the lexicon tool and its two resource URIs.

    Args:
        mcp: The MCP server to register on
        lexicon_service: The service all three entry points share
    """

    @mcp.tool(
        name=GET_LEXICON_TOOL,
        annotations=ToolAnnotations(readOnlyHint=True),
    )
    async def get_lexicon(refresh: bool = False) -> Union[LexiconOutput, ToolError]:
        """
        Retrieve the Gemara Lexicon containing definitions of terms used in the Gemara model.

        The lexicon is cached for 24 hours. Use this to look up what a Gemara term
        means before reading or writing Gemara artifacts.

        :param refresh: Force refresh of lexicon cache (default: false)

        :returns: The lexicon with the following structure:
                - entries: List of terms, each containing:
                    - term: The headword
                    - definition: Explanation of the term
                    - references: Citations for the term
                - source: URL the lexicon was fetched from
                - cached: True if the entries were served from the cache

                Returns ToolError if the lexicon could not be fetched. The ToolError is
                the tool result itself, so check its isError field rather than the
                protocol-level error flag.
        """
        return await get_lexicon_tool(lexicon_service, refresh=refresh)

    def register_lexicon_resource(uri: str) -> None:
        @mcp.resource(
            uri,
            name=LEXICON_RESOURCE_NAME,
            description=LEXICON_RESOURCE_DESCRIPTION,
            mime_type=LEXICON_MIME_TYPE,
        )
        async def read_lexicon() -> str:
            contents = await lexicon_service.read_lexicon_resource(uri)
            return contents.text

    register_lexicon_resource(LEXICON_RESOURCE_URI)
    register_lexicon_resource(LEXICON_RESOURCE_URI_ALIAS)
