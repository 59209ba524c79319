"""Port for the fact-check gateway endpoints as seen by a client."""

from typing import Any, Dict, Optional, Protocol


class GatewayCallError(Exception):
    """A gateway call failed or returned a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GatewayTimeoutError(GatewayCallError):
    """A gateway call did not complete within the client-side bound."""


class ExtractionError(GatewayCallError):
    """The extraction gateway failed."""


class FactCheckAPI(Protocol):
    """Protocol for the four gateway endpoints.

    Every method returns the decoded body: a JSON value when the gateway
    answered with JSON, otherwise the raw text.
    """

    async def extract_claims(self, query: str) -> Any:
        """Run claim extraction over the submitted text."""
        ...

    async def verify_claim(self, payload: Dict[str, Any]) -> Any:
        """Run the logic/tonality check over one claim and its snippets."""
        ...

    async def score_sources(self, payload: Dict[str, Any]) -> Any:
        """Score the credibility of a set of domains."""
        ...

    async def assess_claim(self, payload: Dict[str, Any]) -> Any:
        """Fetch the verdict and evidence for one claim."""
        ...
