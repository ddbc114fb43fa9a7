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
Retrieval of the Gemara Lexicon from its remote YAML document.

The fetch is a single GET with no retry. Failures are raised as one of the
:class:`LexiconFetchError` subclasses so callers can tell a network problem
from a bad status or an undecodable document.
"""

import asyncio
import logging
from typing import List

import aiohttp
import yaml
from pydantic import TypeAdapter, ValidationError

from gemara_mcp_server.client.http_client import HTTPClient
from gemara_mcp_server.utils.common import LexiconEntry
from gemara_mcp_server.utils.exceptions import (
    LexiconDecodeError,
    LexiconRequestError,
    LexiconStatusError,
)

# Logger for this module
logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(List[LexiconEntry])


def parse_lexicon(document: bytes) -> List[LexiconEntry]:
    """
    Decode a YAML lexicon document into entries.

    :param document: Raw YAML bytes, a list of ``{term, definition, references}`` records
    :returns: The entries in document order
    :raises LexiconDecodeError: If the YAML is malformed or not a list of term records
    """
    try:
        data = yaml.safe_load(document)
    except yaml.YAMLError as e:
        raise LexiconDecodeError(f"failed to parse YAML: {e}") from e

    # An empty document decodes to no entries
    if data is None:
        return []
    if not isinstance(data, list):
        raise LexiconDecodeError(
            f"failed to parse YAML: expected a list of terms, got {type(data).__name__}"
        )

    try:
        return _ENTRY_LIST.validate_python(data)
    except ValidationError as e:
        raise LexiconDecodeError(f"failed to parse YAML: {e}") from e


async def fetch_lexicon(http_client: HTTPClient, url: str) -> List[LexiconEntry]:
    """
    Fetch and decode the lexicon at ``url``.

    :param http_client: Client whose session and deadline are used for the request
    :param url: Location of the lexicon YAML document
    :returns: The decoded entries
    :raises LexiconRequestError: On request construction, transport, timeout or read failure
    :raises LexiconStatusError: If the response status is not 200
    :raises LexiconDecodeError: If the body is not a valid lexicon document
    """
    try:
        status, body = await http_client.get(url)
    except aiohttp.InvalidURL as e:
        raise LexiconRequestError(f"failed to create request: {e}") from e
    except asyncio.TimeoutError as e:
        raise LexiconRequestError(
            f"failed to fetch lexicon: request timed out after {http_client.timeout}s"
        ) from e
    except aiohttp.ClientPayloadError as e:
        raise LexiconRequestError(f"failed to read response body: {e}") from e
    except aiohttp.ClientError as e:
        raise LexiconRequestError(f"failed to fetch lexicon: {e}") from e

    if status != 200:
        raise LexiconStatusError(status)

    entries = parse_lexicon(body)
    logger.debug("Fetched %d lexicon entries from %s", len(entries), url)
    return entries
