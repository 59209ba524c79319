"""Dependency injection configuration for hexagonal architecture."""

import logging
from typing import Any, Dict, Optional

import httpx
from dotenv import load_dotenv
from fastapi import Depends, Request

from ..domain.ports.agent_runner import AgentRunner
from ..domain.services.evidence_orchestrator import EvidenceOrchestrator
from ..domain.services.fact_checking_service import FactCheckingService
from .agent.fluo_adapter import FluoAgentAdapter
from .api.gateway_client import GatewayClient
from .config import AgentSettings, ClientSettings

# Load .env from the current directory or its parents, if there is one
load_dotenv()

logger = logging.getLogger(__name__)


# FastAPI dependencies for the gateway side

def get_agent_settings() -> AgentSettings:
    """Settings are re-read on every request so secrets can be fixed without a restart."""
    return AgentSettings.from_env()


def get_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    """The application's shared HTTP client, if the lifespan created one."""
    return getattr(request.app.state, "http_client", None)


def get_agent_runner(
    settings: AgentSettings = Depends(get_agent_settings),
    client: Optional[httpx.AsyncClient] = Depends(get_http_client),
) -> AgentRunner:
    """FastAPI dependency for the upstream agent runner."""
    return FluoAgentAdapter(settings, client)


class ServiceContainer:
    """Service container for the client side (terminal driver)."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize service container.

        Args:
            settings: Gateway client settings, read from the environment if omitted
            http_client: Pre-built HTTP client for the gateway client
        """
        self._settings = settings or ClientSettings.from_env()
        self._services: Dict[str, Any] = {}
        self._setup_services(http_client)

    def _setup_services(self, http_client: Optional[httpx.AsyncClient]) -> None:
        logger.info(f"🔧 Setting up services against {self._settings.base_url}")
        gateway_client = GatewayClient(self._settings, http_client)
        orchestrator = EvidenceOrchestrator(gateway_client)
        self._services = {
            "gateway_client": gateway_client,
            "evidence_orchestrator": orchestrator,
            "fact_checking_service": FactCheckingService(gateway_client, orchestrator),
        }
        logger.info("✅ Service container setup completed")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_gateway_client(self) -> GatewayClient:
        return self.get("gateway_client")

    def get_fact_checking_service(self) -> FactCheckingService:
        return self.get("fact_checking_service")

    async def startup(self) -> None:
        await self.get_gateway_client().initialize()

    async def shutdown(self) -> None:
        await self.get_gateway_client().shutdown()
