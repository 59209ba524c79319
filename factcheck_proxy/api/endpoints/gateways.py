"""Gateway endpoints forwarding to the hosted fact-check agents.

All four endpoints follow the same path: check that the platform is
configured, validate the body, forward one request to the agent and relay
whatever comes back with its original status code.
"""

import json
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Dict, List, Optional, Type, Union

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from ...domain.ports.agent_runner import (
    AgentConfigurationError,
    AgentResponse,
    AgentRunner,
    AgentTimeoutError,
)
from ...infrastructure.config import AgentSettings
from ...infrastructure.dependencies import get_agent_runner, get_agent_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["gateways"])


def _require_claim_id(value: Union[int, str]) -> Union[int, str]:
    if isinstance(value, str) and not value.strip():
        raise ValueError("claim_id must not be empty")
    if not isinstance(value, str) and value == 0:
        raise ValueError("claim_id must not be 0")
    return value


ClaimId = Annotated[Union[int, str], AfterValidator(_require_claim_id)]


class ExtractRequest(BaseModel):
    """Request body for claim extraction."""

    query: str = Field(..., description="Text or URL to extract claims from")

    @field_validator("query")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("query must not be empty")
        return value


class VerifyRequest(BaseModel):
    """Request body for the logic/tonality check of one claim."""

    claim_id: ClaimId
    claim: str
    snippets: Any = None

    @field_validator("claim")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("claim must not be empty")
        return value


class SourceCredRequest(BaseModel):
    """Request body for scoring source domains."""

    claim_id: ClaimId
    domains: List[Any]


class AssessRequest(BaseModel):
    """Request body for the verdict/evidence assessment of one claim."""

    claim_id: ClaimId
    claim: Optional[Any] = None
    query: Optional[Any] = None

    @field_validator("query", "claim")
    @classmethod
    def _blank_is_missing(cls, value: Any) -> Any:
        if value is None or value == "" or value is False or value == 0:
            return None
        return value

    @model_validator(mode="after")
    def _claim_or_query(self) -> "AssessRequest":
        if self.claim is None and self.query is None:
            raise ValueError("claim or query is required")
        return self

    @property
    def instruction(self) -> str:
        if isinstance(self.query, str):
            return self.query
        if self.query is not None:
            return str(self.query)
        return f"Verify: {self.claim}"


@dataclass(frozen=True)
class Gateway:
    """How one endpoint validates, reshapes and forwards its body."""

    name: str
    request_model: Type[BaseModel]
    invalid_message: str
    agent_id: Callable[[AgentSettings], str]
    timeout: Callable[[AgentSettings], Optional[float]]
    upstream_body: Callable[[Any], Dict[str, Any]]


EXTRACT = Gateway(
    name="claims",
    request_model=ExtractRequest,
    invalid_message="Missing or invalid 'query' in body",
    agent_id=lambda s: s.extractor_agent_id,
    timeout=lambda s: s.extract_timeout,
    upstream_body=lambda r: {"query": r.query},
)

VERIFY = Gateway(
    name="claim-verify",
    request_model=VerifyRequest,
    invalid_message="Missing claim_id or claim",
    agent_id=lambda s: s.verifier_agent_id,
    timeout=lambda s: s.verify_timeout,
    upstream_body=lambda r: {
        "query": json.dumps({
            "claim_id": r.claim_id,
            "claim": r.claim,
            "snippets": r.snippets if r.snippets is not None else [],
        })
    },
)

SOURCE_CRED = Gateway(
    name="source-cred",
    request_model=SourceCredRequest,
    invalid_message="Missing claim_id or domains[]",
    agent_id=lambda s: s.source_cred_agent_id,
    timeout=lambda s: s.source_cred_timeout,
    upstream_body=lambda r: {
        "query": json.dumps({"claim_id": r.claim_id, "domains": r.domains})
    },
)

# The assess agent takes a plain instruction string, not a JSON payload
ASSESS = Gateway(
    name="claim-assess",
    request_model=AssessRequest,
    invalid_message="Missing claim_id and claim/query",
    agent_id=lambda s: s.assess_agent_id,
    timeout=lambda s: s.assess_timeout,
    upstream_body=lambda r: {"claim_id": r.claim_id, "query": r.instruction},
)


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def relay(upstream: AgentResponse) -> Response:
    """Pass the upstream reply through with its own status code."""
    if upstream.is_json:
        return JSONResponse(upstream.json_body, status_code=upstream.status_code)
    return Response(
        content=upstream.text_body or "",
        status_code=upstream.status_code,
        media_type=upstream.content_type or "text/plain",
    )


async def _read_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


async def forward(
    gateway: Gateway,
    request: Request,
    settings: AgentSettings,
    runner: AgentRunner,
) -> Response:
    """Validate, forward and relay one gateway request. Never raises."""
    try:
        if not runner.is_configured:
            logger.error(f"/api/{gateway.name}: missing Fluo env vars")
            return error_response("Server not configured", 500)

        body = await _read_body(request)
        try:
            if not isinstance(body, dict):
                raise ValueError("body must be a JSON object")
            parsed = gateway.request_model.model_validate(body)
        except (ValidationError, ValueError) as e:
            logger.info(f"/api/{gateway.name}: rejected body: {e}")
            return error_response(gateway.invalid_message, 400)

        upstream = await runner.run(
            gateway.agent_id(settings),
            gateway.upstream_body(parsed),
            timeout=gateway.timeout(settings),
        )
        return relay(upstream)

    except AgentConfigurationError:
        return error_response("Server not configured", 500)
    except AgentTimeoutError as e:
        logger.warning(f"/api/{gateway.name}: {e}")
        return error_response("Upstream timed out", 500)
    except Exception as e:
        logger.error(f"/api/{gateway.name} error: {type(e).__name__}: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@router.post("/claims")
async def extract_claims(
    request: Request,
    settings: AgentSettings = Depends(get_agent_settings),
    runner: AgentRunner = Depends(get_agent_runner),
) -> Response:
    """Extract the factual claims of a text."""
    return await forward(EXTRACT, request, settings, runner)


@router.post("/claim-verify")
async def verify_claim(
    request: Request,
    settings: AgentSettings = Depends(get_agent_settings),
    runner: AgentRunner = Depends(get_agent_runner),
) -> Response:
    """Check the logic and tonality of one claim against its snippets."""
    return await forward(VERIFY, request, settings, runner)


@router.post("/source-cred")
async def score_sources(
    request: Request,
    settings: AgentSettings = Depends(get_agent_settings),
    runner: AgentRunner = Depends(get_agent_runner),
) -> Response:
    """Score the credibility of the domains behind a claim's evidence."""
    return await forward(SOURCE_CRED, request, settings, runner)


@router.post("/claim-assess")
async def assess_claim(
    request: Request,
    settings: AgentSettings = Depends(get_agent_settings),
    runner: AgentRunner = Depends(get_agent_runner),
) -> Response:
    """Fetch a verdict with supporting and refuting evidence for one claim."""
    return await forward(ASSESS, request, settings, runner)
