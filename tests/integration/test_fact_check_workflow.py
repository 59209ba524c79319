"""Integration tests: client orchestration against the real gateways and a fake platform."""

import json

import httpx
import pytest

from factcheck_proxy.domain.models.session import ClaimStatus, FactCheckSession, InputType
from factcheck_proxy.domain.models.verification import VerdictTone
from factcheck_proxy.domain.services.fact_checking_service import (
    FactCheckError,
    FactCheckingService,
)
from factcheck_proxy.infrastructure.api.gateway_client import GatewayClient
from factcheck_proxy.infrastructure.config import ClientSettings

MOON = "The moon is made of cheese"


@pytest.fixture
def gateway_client(override_app):
    """Gateway client talking to the app in-process."""
    http = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=override_app),
        base_url="http://testserver",
    )
    return GatewayClient(ClientSettings(base_url="http://testserver"), client=http)


@pytest.fixture
def service(gateway_client):
    return FactCheckingService(gateway_client, auto_check_delay=0)


@pytest.fixture
def moon_platform(upstream, agent_settings):
    """Agent replies for the moon-cheese walkthrough."""
    upstream.reply_json(
        {
            "claims": [
                {
                    "id": 1,
                    "short_claim": MOON,
                    "entities": ["moon"],
                    "claim_type": "scientific",
                    "original_text_excerpt": MOON,
                },
                {"id": 2, "short_claim": "Cheese is made from milk"},
            ]
        },
        agent_id=agent_settings.extractor_agent_id,
    )
    upstream.reply_json(
        {
            "claim_checks": {"logical_score": 0.1, "tonality_score": 0.2, "short_reason": "Neutral"},
            "snippet_checks": [{"domain": "nasa.gov"}, {"domain": "nasa.gov"}],
        },
        agent_id=agent_settings.verifier_agent_id,
    )
    upstream.reply_json(
        {"sources": [{"domain": "nasa.gov", "domain_cred_score": 0.95, "trust_labels": ["reliable"]}]},
        agent_id=agent_settings.source_cred_agent_id,
    )
    upstream.reply_json(
        {
            "verdict": "False",
            "confidence": 0.97,
            "refuting_evidence": [{"domain": "nasa.gov", "url": "https://science.nasa.gov/moon/"}],
            "explanation": "Apollo samples show the moon is rock.",
        },
        agent_id=agent_settings.assess_agent_id,
    )
    return upstream


@pytest.mark.asyncio
async def test_moon_cheese_walkthrough(service, moon_platform, agent_settings):
    """Extraction, then verify, source credibility and assess for the first claim."""
    session = FactCheckSession()

    await service.submit(session, MOON)

    assert session.input_type is InputType.TEXT
    assert session.overall_score == 72
    assert [claim.id for claim in session.claims] == [1, 2]

    first = session.get_claim(1)
    assert first.claim_checks.logical_percent == 10
    assert first.claim_checks.tonality_percent == 80
    assert first.sources[0].domain == "nasa.gov"
    assert first.evidence_result.verdict == "False"
    assert first.evidence_result.confidence == 97
    assert first.evidence_result.tone is VerdictTone.DESTRUCTIVE
    assert first.evidence_result.refuting_evidence[0].title == "nasa.gov"
    assert session.status_of(1) is ClaimStatus.DONE

    assert session.get_claim(2).evidence_result is None
    assert session.status_of(2) is ClaimStatus.IDLE

    agents = [moon_platform.sent_agent(i) for i in range(len(moon_platform.requests))]
    assert agents == [
        agent_settings.extractor_agent_id,
        agent_settings.verifier_agent_id,
        agent_settings.source_cred_agent_id,
        agent_settings.assess_agent_id,
    ]
    assert json.loads(moon_platform.sent_body(2)["query"]) == {"claim_id": 1, "domains": ["nasa.gov"]}
    assert moon_platform.sent_body(3) == {"claim_id": 1, "query": f"Verify claim: {MOON}"}


@pytest.mark.asyncio
async def test_second_claim_checked_on_request(service, moon_platform):
    session = FactCheckSession()
    await service.submit(session, MOON)

    claim = await service.check_evidence(session, 2)

    assert claim.evidence_result.verdict == "False"
    assert session.status_of(2) is ClaimStatus.DONE
    assert json.loads(moon_platform.sent_body(4)["query"])["claim"] == "Cheese is made from milk"


@pytest.mark.asyncio
async def test_missing_api_key_fails_submission(service, upstream, agent_settings):
    """Without platform credentials the submission fails and no agent is called."""
    agent_settings.api_key = ""
    session = FactCheckSession()

    with pytest.raises(FactCheckError) as exc_info:
        await service.submit(session, MOON)

    assert "Extractor failed (500)" in str(exc_info.value)
    assert "Server not configured" in str(exc_info.value)
    assert session.claims == []
    assert not session.is_extracting
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_assess_failure_marks_claim_as_error(service, moon_platform, agent_settings):
    """An upstream error on the last step becomes an error verdict on the claim."""
    moon_platform.reply_json({"message": "overloaded"}, status_code=503, agent_id=agent_settings.assess_agent_id)
    session = FactCheckSession()

    await service.submit(session, MOON)

    first = session.get_claim(1)
    assert first.evidence_result.verdict == "error"
    assert first.evidence_result.confidence == 0
    assert "overloaded" in first.evidence_result.explanation
    assert first.sources[0].domain == "nasa.gov"
    assert session.status_of(1) is ClaimStatus.FAILED
