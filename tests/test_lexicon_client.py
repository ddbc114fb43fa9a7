"""Tests for fetching and decoding the remote lexicon document."""

import pytest

from gemara_mcp_server.client.http_client import HTTPClient
from gemara_mcp_server.client.lexicon_client import fetch_lexicon, parse_lexicon
from gemara_mcp_server.utils.exceptions import (
    LexiconDecodeError,
    LexiconFetchError,
    LexiconRequestError,
    LexiconStatusError,
)


class TestParseLexicon:
    """Decoding of the YAML term list."""

    def test_parses_terms_in_document_order(self):
        entries = parse_lexicon(
            b"- term: Control\n  definition: Safeguard\n  references: [Layer 2]\n"
            b"- term: Assessment\n  definition: Check\n  references: [Layer 5, Layer 4]\n"
        )

        assert [e.term for e in entries] == ["Control", "Assessment"]
        assert entries[1].references == ["Layer 5", "Layer 4"]

    def test_duplicate_terms_pass_through(self):
        entries = parse_lexicon(
            b"- term: Control\n  definition: one\n- term: Control\n  definition: two\n"
        )

        assert [e.definition for e in entries] == ["one", "two"]

    def test_missing_or_null_references_become_empty(self):
        entries = parse_lexicon(
            b"- term: Policy\n  definition: Rules\n  references:\n- term: Guidance\n"
        )

        assert entries[0].references == []
        assert entries[1].references == []
        assert entries[1].definition == ""

    def test_empty_document_has_no_entries(self):
        assert parse_lexicon(b"") == []

    def test_malformed_yaml_is_a_decode_error(self):
        with pytest.raises(LexiconDecodeError, match="failed to parse YAML"):
            parse_lexicon(b"invalid: yaml: content: [unclosed")

    def test_mapping_instead_of_list_is_a_decode_error(self):
        with pytest.raises(LexiconDecodeError, match="expected a list"):
            parse_lexicon(b"term: Control\ndefinition: Safeguard\n")

    def test_record_without_term_is_a_decode_error(self):
        with pytest.raises(LexiconDecodeError):
            parse_lexicon(b"- definition: orphan\n")


class TestFetchLexicon:
    """Single GET against a local server."""

    @pytest.mark.asyncio
    async def test_successful_fetch(self, http_client, lexicon_url, remote):
        entries = await fetch_lexicon(http_client, lexicon_url)

        assert len(entries) == 2
        assert entries[0].term == "Assessment"
        assert entries[1].references == ["Layer 2"]
        assert remote.requests == 1
        assert remote.paths == ["/docs/lexicon.yaml"]

    @pytest.mark.asyncio
    async def test_server_error_carries_status_code(
        self, http_client, lexicon_url, remote
    ):
        remote.status = 500
        remote.body = b"boom"

        with pytest.raises(LexiconStatusError) as exc_info:
            await fetch_lexicon(http_client, lexicon_url)

        assert exc_info.value.status_code == 500
        assert "500" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_ok_success_status_is_rejected(
        self, http_client, lexicon_url, remote
    ):
        remote.status = 203

        with pytest.raises(LexiconStatusError):
            await fetch_lexicon(http_client, lexicon_url)

    @pytest.mark.asyncio
    async def test_invalid_yaml_body(self, http_client, lexicon_url, remote):
        remote.body = b"invalid: yaml: content: [unclosed"

        with pytest.raises(LexiconDecodeError):
            await fetch_lexicon(http_client, lexicon_url)

    @pytest.mark.asyncio
    async def test_timeout_is_a_request_error(self, lexicon_url, remote):
        remote.delay = 1.0

        async with HTTPClient(ssl_enabled=False, timeout=0.1) as client:
            with pytest.raises(LexiconRequestError):
                await fetch_lexicon(client, lexicon_url)

    @pytest.mark.asyncio
    async def test_connection_failure_is_a_request_error(self, http_client):
        with pytest.raises(LexiconRequestError, match="failed to fetch lexicon"):
            await fetch_lexicon(http_client, "http://127.0.0.1:1/lexicon.yaml")

    @pytest.mark.asyncio
    async def test_invalid_url_is_a_request_error(self, http_client):
        with pytest.raises(LexiconRequestError, match="failed to create request"):
            await fetch_lexicon(http_client, "not a url")

    @pytest.mark.asyncio
    async def test_all_failures_share_a_base_class(self, http_client, lexicon_url, remote):
        remote.status = 404

        with pytest.raises(LexiconFetchError):
            await fetch_lexicon(http_client, lexicon_url)
