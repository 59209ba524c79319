"""Port for running a hosted upstream agent."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel


class AgentError(Exception):
    """Base class for failures reaching the upstream agent."""


class AgentConfigurationError(AgentError):
    """Server-held credentials are missing; nothing was sent upstream."""


class AgentTimeoutError(AgentError):
    """The upstream agent did not answer within the allotted time."""


class AgentResponse(BaseModel):
    """Upstream reply, kept as close to the wire as possible for relaying."""

    status_code: int
    content_type: str = ""
    json_body: Optional[Any] = None
    text_body: Optional[str] = None

    @property
    def is_json(self) -> bool:
        return "application/json" in self.content_type

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class AgentRunner(ABC):
    """Abstract interface for the hosted agent platform.

    Implementations attach the platform credentials and POST ``body`` to the
    run endpoint of ``agent_id``. Non-2xx replies are returned, not raised.
    """

    @abstractmethod
    async def run(
        self,
        agent_id: str,
        body: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> AgentResponse:
        """Run an agent once.

        Args:
            agent_id: Upstream agent identifier
            body: JSON body to send
            timeout: Overall bound in seconds, or None for the client default

        Returns:
            The upstream response

        Raises:
            AgentConfigurationError: If credentials are not configured
            AgentTimeoutError: If the bound expires
        """
        pass

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present."""
        pass
