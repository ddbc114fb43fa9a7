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
import ssl
from typing import Optional, Tuple, Union

import aiohttp
import truststore

from gemara_mcp_server.utils.constants import DEFAULT_REQUEST_TIMEOUT

# Logger for this module
logger = logging.getLogger("HTTPClient")


class HTTPClient:
    """
    Shared asynchronous HTTP client for the remote documents the server reads.

    It owns one aiohttp session, created lazily, whose connector carries an
    SSL context built from the system truststore.
    """

    def __init__(
        self,
        ssl_enabled: Union[bool, str] = True,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Args:
            ssl_enabled: Whether server certificates are verified (bool) or path
                to an additional CA certificate file (str)
            timeout: Total deadline in seconds applied to each request, covering
                connect, headers and body
        """
        self.ssl_enabled = ssl_enabled
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._ssl_context: Optional[ssl.SSLContext] = None

    def _get_ssl_context(self) -> ssl.SSLContext:
        """
        Get or create the SSL context used for all HTTPS connections.

        The context trusts the system certificate store via truststore, falling
        back to Python's default context. When ``ssl_enabled`` is a path, that
        certificate file is added to the trusted locations.
        """
        if self._ssl_context is None:
            try:
                context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
                logger.debug("Created SSL context using system truststore")
            except Exception as e:
                logger.error("Failed to create truststore SSL context: %s", str(e))
                context = ssl.create_default_context()
                logger.debug("Created default SSL context")

            if isinstance(self.ssl_enabled, str):
                try:
                    context.load_verify_locations(cafile=self.ssl_enabled)
                    logger.debug(
                        "Added certificate file to context: %s", self.ssl_enabled
                    )
                except Exception as e:
                    logger.error(
                        "Failed to add certificate file %s to context: %s",
                        self.ssl_enabled,
                        str(e),
                    )

            self._ssl_context = context

        return self._ssl_context

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            ssl_setting = False if self.ssl_enabled is False else self._get_ssl_context()
            connector = aiohttp.TCPConnector(ssl=ssl_setting, enable_cleanup_closed=True)
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            logger.debug("Created aiohttp session with timeout=%s", self.timeout)
        return self._session

    async def get(self, url: str) -> Tuple[int, bytes]:
        """
        Issue a single GET and read the whole body.

        Args:
            url: Absolute URL to fetch

        Returns:
            The response status code and the complete body bytes

        Raises:
            aiohttp.InvalidURL: If the URL cannot be turned into a request
            aiohttp.ClientError: On transport or body-read failure
            asyncio.TimeoutError: When the deadline expires
        """
        session = await self._ensure_session()
        logger.debug("GET %s", url)
        async with session.get(url) as response:
            body = await response.read()
            return response.status, body

    async def close(self):
        """Close the aiohttp session and its connector"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        logger.info("HTTP client session closed")

    async def __aenter__(self):
        """Async context manager entry"""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
