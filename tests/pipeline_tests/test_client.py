"""
Agent client tests.

Every transport outcome must come back as an AgentReply; nothing raises.
"""

import httpx
import pytest

from swarm_trader.agents.client import (
    AgentClient,
    extract_candidates,
    extract_decision,
    extract_reasoning,
)
from swarm_trader.schemas import ReplyOutcome

from fakes import BAR_ADDRESS, FOO_ADDRESS, scanner_payload, token, vote_payload


def client_with(handler) -> AgentClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AgentClient(http, timeout=5.0)


class TestSend:

    @pytest.mark.asyncio
    async def test_success_posts_multipart_text(self, scanner):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = request.read()
            return httpx.Response(200, json=vote_payload("Yes"))

        reply = await client_with(handler).send(scanner, "Should I Buy $FOO?")

        assert reply.ok
        assert reply.agent_name == "Alpha"
        assert reply.payload == vote_payload("Yes")
        assert seen["url"] == scanner.endpoint
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="text"' in seen["body"]
        assert b"Should I Buy $FOO?" in seen["body"]

    @pytest.mark.asyncio
    async def test_http_error_is_failed_reply(self, scanner):
        reply = await client_with(lambda r: httpx.Response(503, text="busy")).send(scanner, "hi")

        assert reply.outcome == ReplyOutcome.FAILED
        assert "503" in reply.error

    @pytest.mark.asyncio
    async def test_timeout_is_failed_reply(self, scanner):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        reply = await client_with(handler).send(scanner, "hi")

        assert not reply.ok
        assert "timeout" in reply.error

    @pytest.mark.asyncio
    async def test_connection_error_is_failed_reply(self, scanner):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        reply = await client_with(handler).send(scanner, "hi")

        assert not reply.ok
        assert "transport error" in reply.error

    @pytest.mark.asyncio
    async def test_invalid_json_is_failed_reply(self, scanner):
        reply = await client_with(lambda r: httpx.Response(200, text="<html>")).send(scanner, "hi")

        assert not reply.ok
        assert "invalid JSON" in reply.error


class TestExtractors:

    def test_decision_found_in_any_item(self):
        assert extract_decision(vote_payload("No")) == "No"

    def test_decision_missing(self):
        assert extract_decision([{"text": "hmm"}]) is None
        assert extract_decision(None) is None

    def test_reasoning_prefers_content(self):
        payload = [{"text": "plain", "content": {"reasoning": "structured"}}]
        assert extract_reasoning(payload) == "structured"

    def test_reasoning_falls_back_to_text(self):
        assert extract_reasoning([{"text": "plain"}]) == "plain"

    def test_candidates_from_trending_tokens(self):
        payload = scanner_payload([token("FOO", FOO_ADDRESS), token("BAR", BAR_ADDRESS, network_id=42161)])

        foo, bar = extract_candidates(payload)

        assert foo.symbol == "FOO"
        assert foo.address == FOO_ADDRESS
        assert foo.chain_id == 8453
        assert bar.chain_id == 42161

    def test_candidates_limit(self):
        tokens = [token(f"T{i}", "0x" + f"{i:02x}" * 20) for i in range(8)]

        candidates = extract_candidates(scanner_payload(tokens), limit=5)

        assert [c.symbol for c in candidates] == ["T0", "T1", "T2", "T3", "T4"]

    def test_candidates_sorted_by_rank_when_present(self):
        tokens = [
            token("C", "0x" + "0c" * 20),
            token("B", "0x" + "0b" * 20, rank=2),
            token("A", "0x" + "0a" * 20, rank=1),
            token("D", "0x" + "0d" * 20),
        ]

        candidates = extract_candidates(scanner_payload(tokens))

        assert [c.symbol for c in candidates] == ["A", "B", "C", "D"]

    def test_malformed_candidates_skipped(self):
        tokens = [{"symbol": "NOADDR"}, "junk", token("FOO", FOO_ADDRESS)]

        candidates = extract_candidates(scanner_payload(tokens))

        assert [c.symbol for c in candidates] == ["FOO"]

    def test_no_trending_tokens(self):
        assert extract_candidates([{"text": "nothing today"}]) == []
        assert extract_candidates({"unexpected": True}) == []
