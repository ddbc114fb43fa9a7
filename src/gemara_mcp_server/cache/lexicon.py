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

import threading
from typing import Optional, Sequence, Tuple

from gemara_mcp_server.utils.common import LexiconEntry


class LexiconCache:
    """
    Class to hold the most recently fetched lexicon and its fetch time.

    There is a single implicit key, the lexicon itself, and a write replaces
    the whole document. Entries and timestamp are only ever read and written
    together under one lock. The lock is never held across an await.
    """

    def __init__(self):
        """Initialize an empty, never populated cache."""
        self._lock = threading.Lock()
        self._entries: Tuple[LexiconEntry, ...] = ()
        self._fetched_at: Optional[float] = None

    def reset(self):
        """Reset the cache to its initial state."""
        with self._lock:
            self._entries = ()
            self._fetched_at = None

    def read(self) -> Tuple[Tuple[LexiconEntry, ...], Optional[float]]:
        """
        Get the current snapshot.

        Returns:
            The cached entries and the time they were fetched, or ``((), None)``
            if the cache was never populated
        """
        with self._lock:
            return self._entries, self._fetched_at

    def write(self, entries: Sequence[LexiconEntry], now: float) -> None:
        """
        Replace the cached entries and their fetch time.

        Args:
            entries: Entries from a successful fetch
            now: Time of that fetch, in the same clock as :meth:`is_fresh`
        """
        entries = tuple(entries)
        with self._lock:
            self._entries = entries
            self._fetched_at = now

    def is_fresh(self, now: float, ttl: float) -> bool:
        """
        Check whether the cache was populated less than ``ttl`` seconds before ``now``.
        """
        with self._lock:
            return self._fetched_at is not None and (now - self._fetched_at) < ttl
