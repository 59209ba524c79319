"""Fluo implementation of the agent runner port."""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ...domain.ports.agent_runner import (
    AgentConfigurationError,
    AgentResponse,
    AgentRunner,
    AgentTimeoutError,
)
from ..config import AgentSettings

logger = logging.getLogger(__name__)


class FluoAgentAdapter(AgentRunner):
    """Runs hosted Fluo agents over HTTPS.

    The adapter borrows an ``httpx.AsyncClient`` owned by the application
    when one is given, and otherwise opens a short-lived client per call.
    """

    def __init__(
        self,
        settings: AgentSettings,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            settings: Credentials and endpoint configuration
            client: Shared HTTP client, if the application owns one
        """
        self._settings = settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "x-api-key": self._settings.api_key,
            "x-project-id": self._settings.project_id,
        }

    async def run(
        self,
        agent_id: str,
        body: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> AgentResponse:
        """Run an agent and return its raw reply."""
        if not self.is_configured:
            logger.error("Missing Fluo env vars")
            raise AgentConfigurationError("Server not configured")

        url = self._settings.run_url(agent_id)
        try:
            if self._client is not None:
                return await asyncio.wait_for(self._post(self._client, url, body), timeout)
            async with httpx.AsyncClient(timeout=self._settings.http_timeout) as client:
                return await asyncio.wait_for(self._post(client, url, body), timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"⏱️ Agent {agent_id} timed out after {timeout or self._settings.http_timeout}s")
            raise AgentTimeoutError(f"Agent {agent_id} timed out") from e

    async def _post(
        self,
        client: httpx.AsyncClient,
        url: str,
        body: Dict[str, Any],
    ) -> AgentResponse:
        response = await client.post(url, json=body, headers=self._headers())
        content_type = response.headers.get("content-type", "")

        if "application/json" in content_type:
            result = AgentResponse(
                status_code=response.status_code,
                content_type=content_type,
                json_body=response.json(),
            )
        else:
            result = AgentResponse(
                status_code=response.status_code,
                content_type=content_type,
                text_body=response.text,
            )

        if result.ok:
            logger.info(f"🤖 {url} -> {response.status_code} ({content_type or 'no content type'})")
        else:
            logger.warning(f"⚠️ {url} -> {response.status_code}: {response.text[:200]}")
        return result
