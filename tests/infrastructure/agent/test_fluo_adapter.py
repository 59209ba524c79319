"""Tests for the Fluo agent adapter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from factcheck_proxy.domain.ports.agent_runner import (
    AgentConfigurationError,
    AgentTimeoutError,
)
from factcheck_proxy.infrastructure.agent.fluo_adapter import FluoAgentAdapter
from factcheck_proxy.infrastructure.config import AgentSettings


@pytest.fixture
def settings() -> AgentSettings:
    return AgentSettings(api_key="k", project_id="p", api_base="https://fluo.test/api/v1")


@pytest.mark.asyncio
async def test_run_returns_json_reply(settings):
    """JSON replies are decoded and keep their status code."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(207, json={"claims": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        adapter = FluoAgentAdapter(settings, client)
        response = await adapter.run("agent-1", {"query": "q"}, timeout=1.0)

    assert response.status_code == 207
    assert response.is_json
    assert response.json_body == {"claims": []}
    assert response.text_body is None
    assert str(seen[0].url) == "https://fluo.test/api/v1/agents/agent-1/run"
    assert seen[0].headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_run_returns_text_reply(settings):
    """Anything that is not JSON stays raw text."""
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))

    async with httpx.AsyncClient(transport=transport) as client:
        response = await FluoAgentAdapter(settings, client).run("agent-1", {"query": "q"})

    assert response.status_code == 500
    assert not response.is_json
    assert not response.ok
    assert response.text_body == "boom"
    assert response.content_type.startswith("text/plain")


@pytest.mark.asyncio
async def test_run_without_credentials_sends_nothing():
    """Missing credentials fail before any request is made."""
    handler = MagicMock()

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        adapter = FluoAgentAdapter(AgentSettings(api_key="k"), client)
        assert not adapter.is_configured
        with pytest.raises(AgentConfigurationError):
            await adapter.run("agent-1", {"query": "q"})

    handler.assert_not_called()


@pytest.mark.asyncio
async def test_run_is_cancelled_after_timeout(settings):
    """The overall bound cancels a slow upstream call."""
    cancelled = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(AgentTimeoutError):
            await FluoAgentAdapter(settings, client).run("agent-1", {}, timeout=0.05)

    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_run_opens_own_client_when_none_shared(settings):
    """Without a shared client, a short-lived one is used for the call."""
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    mock_client.post.return_value = httpx.Response(200, json={"ok": True})

    with patch("httpx.AsyncClient", return_value=mock_client) as client_class:
        response = await FluoAgentAdapter(settings).run("agent-9", {"query": "q"}, timeout=1.0)

    client_class.assert_called_once_with(timeout=settings.http_timeout)
    mock_client.post.assert_awaited_once()
    url = mock_client.post.await_args.args[0]
    assert url == "https://fluo.test/api/v1/agents/agent-9/run"
    assert mock_client.post.await_args.kwargs["headers"]["x-api-key"] == "k"
    assert response.json_body == {"ok": True}
