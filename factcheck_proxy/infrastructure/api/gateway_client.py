"""HTTP client for the fact-check gateway endpoints."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from ...domain.ports.fact_check_api import (
    ExtractionError,
    GatewayCallError,
    GatewayTimeoutError,
)
from ..config import ClientSettings

logger = logging.getLogger(__name__)

EXTRACT_PATH = "/api/claims"
VERIFY_PATH = "/api/claim-verify"
SOURCE_CRED_PATH = "/api/source-cred"
ASSESS_PATH = "/api/claim-assess"


def _decode(response: httpx.Response) -> Any:
    """JSON body when the gateway says so, raw text otherwise."""
    if "application/json" in response.headers.get("content-type", ""):
        return response.json()
    return response.text


class GatewayClient:
    """Client implementation of the ``FactCheckAPI`` port.

    Extraction is unbounded on the client side; every evidence call is
    cancelled once ``settings.timeout`` seconds have passed.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            settings: Base URL and call timeout
            client: Pre-built HTTP client (tests pass one with a mock transport)
        """
        self._settings = settings or ClientSettings()
        self._client = client
        self._owns_client = client is None

    async def initialize(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._settings.base_url, timeout=None)

    async def shutdown(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GatewayClient":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.shutdown()

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client not initialized")
        return self._client

    async def extract_claims(self, query: str) -> Any:
        try:
            response = await self._http().post(EXTRACT_PATH, json={"query": query})
        except httpx.HTTPError as e:
            raise ExtractionError(f"Extractor failed: {e}") from e

        if not response.is_success:
            raise ExtractionError(
                f"Extractor failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ExtractionError(
                f"Extractor returned a non-JSON body: {response.text[:200]}",
                status_code=response.status_code,
            ) from e

    async def verify_claim(self, payload: Dict[str, Any]) -> Any:
        return await self._call(VERIFY_PATH, payload)

    async def score_sources(self, payload: Dict[str, Any]) -> Any:
        return await self._call(SOURCE_CRED_PATH, payload)

    async def assess_claim(self, payload: Dict[str, Any]) -> Any:
        return await self._call(ASSESS_PATH, payload)

    async def _call(self, path: str, payload: Dict[str, Any]) -> Any:
        """POST ``payload`` and return the decoded body.

        Raises:
            GatewayTimeoutError: If the call outlives the client bound
            GatewayCallError: On a non-2xx reply or a transport failure
        """
        timeout = self._settings.timeout
        try:
            response = await asyncio.wait_for(self._http().post(path, json=payload), timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise GatewayTimeoutError(f"{path} timed out after {timeout:g}s") from e
        except httpx.HTTPError as e:
            raise GatewayCallError(f"{path} failed: {e}") from e

        body = _decode(response)
        if not response.is_success:
            message = body if isinstance(body, str) else json.dumps(body)
            logger.warning(f"⚠️ {path} -> {response.status_code}: {message[:200]}")
            raise GatewayCallError(message, status_code=response.status_code)
        return body
