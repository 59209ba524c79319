"""Health check endpoints."""

from typing import Dict, Union

from fastapi import APIRouter, Depends

from ...infrastructure.config import AgentSettings
from ...infrastructure.dependencies import get_agent_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    settings: AgentSettings = Depends(get_agent_settings),
) -> Dict[str, Union[str, bool, Dict[str, str]]]:
    """Report whether the gateways can reach the agent platform.

    Returns:
        Overall status, whether credentials are configured, and the agent
        each gateway targets
    """
    return {
        "status": "healthy" if settings.is_configured else "not_configured",
        "configured": settings.is_configured,
        "agents": {
            "claims": settings.extractor_agent_id,
            "claim-verify": settings.verifier_agent_id,
            "source-cred": settings.source_cred_agent_id,
            "claim-assess": settings.assess_agent_id,
        },
    }
