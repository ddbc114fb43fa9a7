"""Shared fixtures for the Gemara MCP server tests."""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from gemara_mcp_server.client.http_client import HTTPClient
from gemara_mcp_server.utils.common import LexiconEntry

LEXICON_YAML = """\
- term: Assessment
  definition: Atomic process used to determine a resource's compliance
  references: ["Layer 5"]
- term: Control
  definition: Safeguard or countermeasure
  references: ["Layer 2"]
"""

CONTROL_CATALOG_YAML = """\
metadata:
  id: OSPS-B
  version: 2025.02.25
  date: 2025-02-25
  title: Open Source Project Security Baseline
controls:
  - id: OSPS-AC-01
    title: Enforce multi-factor authentication
  - id: OSPS-AC-02
    title: Restrict collaborator permissions
"""

GEMARA_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$defs": {
        "ControlCatalog": {
            "type": "object",
            "required": ["metadata", "controls"],
            "properties": {
                "metadata": {"$ref": "#/$defs/Metadata"},
                "controls": {"type": "array", "items": {"$ref": "#/$defs/Control"}},
            },
        },
        "Metadata": {
            "type": "object",
            "required": ["id", "version"],
            "properties": {
                "id": {"type": "string"},
                "version": {"type": "string"},
                "date": {"type": "string"},
                "title": {"type": "string"},
            },
        },
        "Control": {
            "type": "object",
            "required": ["id", "title"],
            "properties": {
                "id": {"type": "string"},
                "title": {"type": "string"},
            },
        },
    },
}


def make_entries(*terms: str) -> List[LexiconEntry]:
    return [
        LexiconEntry(term=term, definition=f"Definition of {term}", references=[])
        for term in terms
    ]


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RemoteDocument:
    """What the local test server answers with, and how often it was asked."""

    body: bytes = LEXICON_YAML.encode()
    status: int = 200
    content_type: str = "application/yaml"
    delay: float = 0.0
    requests: int = 0
    paths: List[str] = field(default_factory=list)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def remote() -> RemoteDocument:
    return RemoteDocument()


@pytest_asyncio.fixture
async def remote_server(remote: RemoteDocument):
    """Local HTTP server serving ``remote`` at any path."""

    async def handler(request: web.Request) -> web.Response:
        remote.requests += 1
        remote.paths.append(request.path)
        if remote.delay:
            await asyncio.sleep(remote.delay)
        return web.Response(
            body=remote.body, status=remote.status, content_type=remote.content_type
        )

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", handler)
    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture
def lexicon_url(remote_server: TestServer) -> str:
    return str(remote_server.make_url("/docs/lexicon.yaml"))


@pytest_asyncio.fixture
async def http_client():
    client = HTTPClient(ssl_enabled=False, timeout=5.0)
    try:
        yield client
    finally:
        await client.close()
