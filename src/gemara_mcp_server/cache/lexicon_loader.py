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
Access to the cached Gemara Lexicon.

Both public entry points, the ``get_lexicon`` tool and the lexicon resource
read, go through the same two steps: :meth:`LexiconService.ensure_fresh`
fetches when the cache is empty, stale or a refresh is forced. A call that
fetched serves the entries it fetched; otherwise
:meth:`LexiconService.snapshot` reads the cache. The ``cached`` flag reported
by the tool comes straight from whether this call fetched.

Concurrent cache misses are not coalesced: each one performs its own fetch
and the last successful write wins.
"""

import json
import logging
import time
from typing import Awaitable, Callable, List, Optional, Tuple

from gemara_mcp_server.cache.lexicon import LexiconCache
from gemara_mcp_server.client.http_client import HTTPClient
from gemara_mcp_server.client.lexicon_client import fetch_lexicon
from gemara_mcp_server.utils.common import (
    FetchOutcome,
    LexiconEntry,
    LexiconOutput,
    LexiconResourceContents,
)
from gemara_mcp_server.utils.constants import (
    LEXICON_CACHE_TTL,
    LEXICON_MIME_TYPE,
    LEXICON_RESOURCE_URI,
    LEXICON_URL,
)

# Logger for this module
logger = logging.getLogger(__name__)

Fetcher = Callable[[HTTPClient, str], Awaitable[List[LexiconEntry]]]


class LexiconService:
    """Serves the lexicon from a :class:`LexiconCache`, fetching on miss."""

    def __init__(
        self,
        http_client: HTTPClient,
        cache: Optional[LexiconCache] = None,
        source_url: str = LEXICON_URL,
        ttl: float = LEXICON_CACHE_TTL,
        clock: Callable[[], float] = time.time,
        fetcher: Fetcher = fetch_lexicon,
    ):
        """
        Args:
            http_client: Client handed to the fetcher
            cache: Cache to serve from; a new empty one when omitted
            source_url: Location of the lexicon document
            ttl: Seconds a fetch stays fresh
            clock: Source of the current time, in seconds
            fetcher: Coroutine function retrieving the entries from ``source_url``
        """
        self.http_client = http_client
        self.cache = cache if cache is not None else LexiconCache()
        self.source_url = source_url
        self.ttl = ttl
        self._clock = clock
        self._fetcher = fetcher

    async def ensure_fresh(self, force_refresh: bool = False) -> FetchOutcome:
        """
        Make sure the cache holds a fresh lexicon.

        Args:
            force_refresh: Fetch even if the cache is fresh

        Returns:
            Whether this call fetched the lexicon, and the entries it fetched

        Raises:
            LexiconFetchError: If a needed fetch fails. The cache is left as it was.
        """
        if not force_refresh:
            entries, _ = self.cache.read()
            if entries and self.cache.is_fresh(self._clock(), self.ttl):
                logger.debug("Lexicon cache hit")
                return FetchOutcome(did_fetch=False)
            logger.debug("Lexicon cache empty or stale")

        # The body is fully read and decoded before the cache is touched
        entries = await self._fetcher(self.http_client, self.source_url)
        self.cache.write(entries, self._clock())
        logger.info("Lexicon cache updated with %d entries", len(entries))
        return FetchOutcome(did_fetch=True, entries=entries)

    def snapshot(self) -> Tuple[Tuple[LexiconEntry, ...], Optional[float]]:
        return self.cache.read()

    async def _current_entries(self, force_refresh: bool = False):
        outcome = await self.ensure_fresh(force_refresh=force_refresh)
        if outcome.did_fetch:
            # Another caller may have written the cache since this fetch
            return outcome, list(outcome.entries)
        entries, _ = self.snapshot()
        return outcome, list(entries)

    async def get_lexicon(self, refresh: bool = False) -> LexiconOutput:
        """
        Return the lexicon for the ``get_lexicon`` tool.

        Args:
            refresh: Bypass the cache and fetch the lexicon again

        Returns:
            The entries, their source, and ``cached=False`` exactly when this call fetched
        """
        outcome, entries = await self._current_entries(force_refresh=refresh)
        return LexiconOutput(
            entries=entries,
            source=self.source_url,
            cached=not outcome.did_fetch,
        )

    async def read_lexicon_resource(
        self, requested_uri: Optional[str] = None
    ) -> LexiconResourceContents:
        """
        Return the lexicon as JSON resource contents.

        Stale data is never served: if the cache is stale and the fetch fails,
        the error propagates.

        Args:
            requested_uri: URI the caller asked for, echoed back. Defaults to the
                canonical lexicon URI.
        """
        _, entries = await self._current_entries()
        text = json.dumps([entry.model_dump() for entry in entries])
        return LexiconResourceContents(
            uri=requested_uri or LEXICON_RESOURCE_URI,
            mime_type=LEXICON_MIME_TYPE,
            text=text,
        )
