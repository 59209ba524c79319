"""Test configuration and common fixtures."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from factcheck_proxy.api.app import app
from factcheck_proxy.infrastructure.config import AgentSettings
from factcheck_proxy.infrastructure.dependencies import get_agent_settings, get_http_client

API_BASE = "https://fluo.test/api/v1"

Reply = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """Stand-in for the hosted agent platform.

    Records every request and answers with ``replies[agent_id]`` when set,
    otherwise with ``default``.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.replies: Dict[str, Reply] = {}
        self.default: Reply = lambda request: httpx.Response(200, json={"ok": True})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        agent_id = request.url.path.rstrip("/").split("/")[-2]
        return self.replies.get(agent_id, self.default)(request)

    def reply_json(self, body: Any, status_code: int = 200, agent_id: Optional[str] = None) -> None:
        reply = lambda request: httpx.Response(status_code, json=body)
        if agent_id is None:
            self.default = reply
        else:
            self.replies[agent_id] = reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def sent_body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)

    def sent_agent(self, index: int = -1) -> str:
        return self.requests[index].url.path.split("/")[-2]


@pytest.fixture
def agent_settings() -> AgentSettings:
    """Fully configured settings pointing at the fake platform."""
    return AgentSettings(
        api_key="test-key",
        project_id="test-project",
        api_base=API_BASE,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def override_app(agent_settings: AgentSettings, upstream: FakeUpstream):
    """Route the app's upstream calls to the fake platform."""
    client = httpx.AsyncClient(transport=upstream.transport)
    app.dependency_overrides[get_agent_settings] = lambda: agent_settings
    app.dependency_overrides[get_http_client] = lambda: client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(override_app) -> TestClient:
    """Create a test client."""
    return TestClient(override_app)
