"""Tests for server wiring, configuration and the command line."""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from mcp.server.fastmcp import FastMCP

from gemara_mcp_server import __version__
from gemara_mcp_server.cache import LexiconCache, LexiconService
from gemara_mcp_server.client import HTTPClient, SchemaRegistry
from gemara_mcp_server.mcp_server_main import (
    ServerMode,
    _make_lifespan,
    initialize_http_client,
    main,
    parse_ssl_flag,
    register_server_tools,
)
from gemara_mcp_server.utils.constants import (
    GET_LEXICON_TOOL,
    LEXICON_MIME_TYPE,
    LEXICON_RESOURCE_URI,
    LEXICON_RESOURCE_URI_ALIAS,
    VALIDATE_ARTIFACT_TOOL,
)

from conftest import CONTROL_CATALOG_YAML, GEMARA_SCHEMA, make_entries


@pytest.fixture
def fetcher():
    return AsyncMock(return_value=make_entries("Assessment", "Control"))


@pytest.fixture
def server(fetcher, clock):
    mcp = FastMCP("gemara-mcp-test")
    lexicon_service = LexiconService(
        http_client=None, cache=LexiconCache(), clock=clock, fetcher=fetcher
    )
    schema_registry = SchemaRegistry(schema_document=GEMARA_SCHEMA)
    register_server_tools(mcp, lexicon_service, schema_registry, ServerMode.ADVISORY)
    return mcp


def tool_payload(result):
    """Decode the JSON text content of a call_tool result."""
    # Newer SDKs return (content, structured_content)
    content = result[0] if isinstance(result, tuple) else result
    return json.loads(content[0].text)


class TestRegistration:
    @pytest.mark.asyncio
    async def test_advisory_tools(self, server):
        tools = await server.list_tools()

        assert {tool.name for tool in tools} == {
            GET_LEXICON_TOOL,
            VALIDATE_ARTIFACT_TOOL,
        }
        for tool in tools:
            assert tool.annotations.readOnlyHint is True

    @pytest.mark.asyncio
    async def test_lexicon_resources(self, server):
        resources = await server.list_resources()

        uris = {str(resource.uri).rstrip("/") for resource in resources}
        assert uris == {LEXICON_RESOURCE_URI, LEXICON_RESOURCE_URI_ALIAS}
        assert all(r.mimeType == LEXICON_MIME_TYPE for r in resources)

    @pytest.mark.asyncio
    async def test_both_uris_read_the_same_cache(self, server, fetcher):
        canonical = list(await server.read_resource(LEXICON_RESOURCE_URI))
        alias = list(await server.read_resource(LEXICON_RESOURCE_URI_ALIAS))

        assert canonical[0].mime_type == LEXICON_MIME_TYPE
        assert json.loads(canonical[0].content) == json.loads(alias[0].content)
        assert [e["term"] for e in json.loads(alias[0].content)] == [
            "Assessment",
            "Control",
        ]
        fetcher.assert_awaited_once()

    def test_advisory_mode_is_read_only(self):
        assert ServerMode("advisory") is ServerMode.ADVISORY
        assert "read-only" in ServerMode.ADVISORY.description


class TestConfiguration:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, True),
            ("true", True),
            ("FALSE", False),
            ("/etc/ssl/certs/ca.pem", "/etc/ssl/certs/ca.pem"),
        ],
    )
    def test_parse_ssl_flag(self, value, expected):
        assert parse_ssl_flag(value) == expected

    def test_http_client_from_environment(self, monkeypatch):
        monkeypatch.setenv("SSL_ENABLED", "false")
        monkeypatch.setenv("REQUEST_TIMEOUT", "12.5")

        client = initialize_http_client()

        assert isinstance(client, HTTPClient)
        assert client.ssl_enabled is False
        assert client.timeout == 12.5

    @pytest.mark.parametrize("timeout", ["0", "-3"])
    def test_non_positive_timeout_is_rejected(self, monkeypatch, timeout):
        monkeypatch.setenv("REQUEST_TIMEOUT", timeout)

        with pytest.raises(ValueError, match="REQUEST_TIMEOUT"):
            initialize_http_client()


class TestCommandLine:
    def test_version(self, capsys):
        assert main(["version"]) == 0

        assert capsys.readouterr().out.strip() == f"Gemara MCP Server {__version__}"

    def test_invalid_configuration_exits_non_zero(self, monkeypatch):
        monkeypatch.setenv("REQUEST_TIMEOUT", "0")

        assert main(["serve"]) == 1


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_get_lexicon_round_trip(self, server, fetcher):
        first = tool_payload(await server.call_tool(GET_LEXICON_TOOL, {}))
        second = tool_payload(
            await server.call_tool(GET_LEXICON_TOOL, {"refresh": False})
        )

        assert first["cached"] is False
        assert second["cached"] is True
        assert [e["term"] for e in second["entries"]] == ["Assessment", "Control"]
        fetcher.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_validate_artifact_round_trip(self, server):
        payload = tool_payload(
            await server.call_tool(
                VALIDATE_ARTIFACT_TOOL,
                {"artifact_content": CONTROL_CATALOG_YAML, "definition": "ControlCatalog"},
            )
        )

        assert payload == {"valid": True, "errors": [], "message": "Artifact is valid"}

    @pytest.mark.asyncio
    async def test_function_error_is_reported_in_the_result(self, server):
        payload = tool_payload(
            await server.call_tool(
                VALIDATE_ARTIFACT_TOOL,
                {"artifact_content": CONTROL_CATALOG_YAML, "definition": ""},
            )
        )

        assert payload["isError"] is True
        assert payload["message"] == "definition is required"

    @pytest.mark.asyncio
    async def test_descriptions_explain_error_results(self, server):
        tools = await server.list_tools()

        for tool in tools:
            assert "isError field" in tool.description


class TestSessionLifespan:
    @pytest.mark.asyncio
    async def test_overlapping_sessions_share_the_client(
        self, http_client, lexicon_url, remote, clock
    ):
        remote.delay = 0.5
        lifespan = _make_lifespan(http_client)
        service = LexiconService(http_client, source_url=lexicon_url, clock=clock)

        async def long_session():
            async with lifespan(None):
                return await service.get_lexicon()

        async def short_session():
            async with lifespan(None):
                await asyncio.sleep(0.1)

        result, _ = await asyncio.gather(long_session(), short_session())

        assert result.cached is False
        assert [e.term for e in result.entries] == ["Assessment", "Control"]
        assert remote.requests == 1

    @pytest.mark.asyncio
    async def test_client_reopens_after_last_session(
        self, http_client, lexicon_url, remote, clock
    ):
        lifespan = _make_lifespan(http_client)
        service = LexiconService(http_client, source_url=lexicon_url, clock=clock)

        async with lifespan(None):
            await service.get_lexicon()
        async with lifespan(None):
            result = await service.get_lexicon(refresh=True)

        assert result.cached is False
        assert len(result.entries) == 2
        assert remote.requests == 2
