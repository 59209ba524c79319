"""Per-claim evidence orchestration: verify, score sources, assess."""

import logging
import math
from numbers import Real
from typing import Any, Dict, List, Optional

from ..models.claim import ProcessedClaim
from ..models.session import ClaimStatus, FactCheckSession
from ..models.verification import (
    ClaimCheck,
    EvidenceItem,
    EvidenceResult,
    SourceCredibility,
)
from ..ports.fact_check_api import FactCheckAPI

logger = logging.getLogger(__name__)

DEFAULT_VERDICT = "Insufficient evidence"
DEFAULT_CONFIDENCE = 30
ASSESS_QUERY_PREFIX = "Verify claim: "


def normalize_confidence(raw: Any) -> int:
    """Convert an upstream confidence into a 0-100 percentage.

    Values up to 1 are read as fractions, larger values as percentages.
    Anything non-numeric gives the default of 30.
    """
    if isinstance(raw, bool) or not isinstance(raw, Real):
        return DEFAULT_CONFIDENCE
    if isinstance(raw, float) and not math.isfinite(raw):
        return DEFAULT_CONFIDENCE
    if raw > 100:
        return 100
    if raw < 0:
        return 0
    value = raw * 100 if raw <= 1 else raw
    # Half-up rounding, not Python's round-half-even
    return int(min(100, max(0, math.floor(value + 0.5))))


def _as_object(response: Any) -> Dict[str, Any]:
    """Treat non-object responses (raw text, lists) as empty objects."""
    return response if isinstance(response, dict) else {}


def collect_domains(
    sources: Optional[List[SourceCredibility]],
    snippet_checks: List[Any],
) -> List[str]:
    """Distinct domains of the known sources and the snippet checks, first-seen order."""
    domains: List[str] = []
    candidates = [source.domain for source in sources or []]
    candidates += [check.get("domain") for check in snippet_checks if isinstance(check, dict)]
    for domain in candidates:
        if domain and isinstance(domain, str) and domain not in domains:
            domains.append(domain)
    return domains


def build_evidence_result(
    claim: ProcessedClaim,
    assess_response: Dict[str, Any],
    verify_response: Dict[str, Any],
) -> EvidenceResult:
    """Final evidence record from the assess reply, backed by the verify reply."""

    def evidence(key: str) -> List[EvidenceItem]:
        items = assess_response.get(key)
        if not isinstance(items, list):
            return []
        return [EvidenceItem.from_raw(item) for item in items]

    claim_text = assess_response.get("claim")
    verdict = assess_response.get("verdict")
    explanation = assess_response.get("explanation")
    if explanation is None:
        explanation = verify_response.get("explanation")

    return EvidenceResult(
        claim=str(claim_text) if claim_text is not None else claim.short_claim,
        verdict=str(verdict) if verdict is not None else DEFAULT_VERDICT,
        confidence=normalize_confidence(assess_response.get("confidence")),
        supporting_evidence=evidence("supporting_evidence"),
        refuting_evidence=evidence("refuting_evidence"),
        explanation="" if explanation is None else str(explanation),
    )


class EvidenceOrchestrator:
    """Runs the three evidence steps for one claim, strictly in sequence.

    Each step's partial result is merged into the session as soon as it is
    known. A failure at any step stops the run and records an error
    ``EvidenceResult`` for the claim; nothing is retried and nothing is
    raised to the caller.
    """

    def __init__(self, api: FactCheckAPI, tolerate_source_failures: bool = False):
        """Initialize the orchestrator.

        Args:
            api: Client for the gateway endpoints
            tolerate_source_failures: Keep going with unchanged sources when
                the source-credibility call fails instead of aborting the run
        """
        self._api = api
        self._tolerate_source_failures = tolerate_source_failures

    async def run(
        self,
        session: FactCheckSession,
        claim_id: int,
        claim: Optional[ProcessedClaim] = None,
    ) -> Optional[ProcessedClaim]:
        """Check the evidence for one claim.

        Args:
            session: Session holding the claim
            claim_id: Id of the claim to check
            claim: Snapshot to work from instead of looking it up

        Returns:
            The claim's final state, or None if it is not in the session
        """
        claim = claim or session.get_claim(claim_id)
        if claim is None:
            logger.warning(f"⚠️ Evidence check requested for unknown claim {claim_id}")
            return None

        generation = session.generation
        succeeded = False
        session.set_status(claim_id, ClaimStatus.RUNNING)
        logger.info(f"🔍 Checking evidence for claim {claim_id}: {claim.short_claim[:100]}")

        try:
            await self._check(session, generation, claim)
            succeeded = True
        except Exception as e:
            logger.error(f"❌ Evidence check failed for claim {claim_id}: {e}")
            reason = str(e) or type(e).__name__
            self._merge(
                session,
                generation,
                claim_id,
                evidence_result=EvidenceResult.error(claim.short_claim, reason),
            )
        finally:
            if session.generation == generation:
                session.set_status(
                    claim_id, ClaimStatus.DONE if succeeded else ClaimStatus.FAILED
                )

        return session.get_claim(claim_id) if session.generation == generation else None

    async def _check(
        self,
        session: FactCheckSession,
        generation: int,
        claim: ProcessedClaim,
    ) -> None:
        claim_id = claim.id

        # 1) logic and tonality
        verify_response = _as_object(
            await self._api.verify_claim({
                "claim_id": claim_id,
                "claim": claim.short_claim,
                "snippets": [source.as_snippet() for source in claim.sources or []],
            })
        )
        claim_checks = ClaimCheck.from_raw(verify_response.get("claim_checks"))
        snippet_checks = verify_response.get("snippet_checks")
        if not isinstance(snippet_checks, list):
            snippet_checks = []
        current = self._merge(
            session,
            generation,
            claim_id,
            claim_checks=self._merged_checks(session, claim, claim_checks),
        ) or claim
        logger.info(f"🧠 Claim {claim_id} verified, {len(snippet_checks)} snippet checks")

        # 2) source credibility, skipped when there is nothing to score
        domains = collect_domains(current.sources, snippet_checks)
        if domains:
            sources = await self._score_sources(claim_id, domains)
            if sources is not None:
                current = self._merge(session, generation, claim_id, sources=sources) or current
                logger.info(f"📚 Claim {claim_id}: scored {len(sources)} sources")

        # 3) verdict and evidence
        assess_response = _as_object(
            await self._api.assess_claim({
                "claim_id": claim_id,
                "query": ASSESS_QUERY_PREFIX + claim.short_claim,
            })
        )
        result = build_evidence_result(claim, assess_response, verify_response)
        self._merge(
            session,
            generation,
            claim_id,
            claim_checks=self._merged_checks(session, current, claim_checks),
            evidence_result=result,
        )
        logger.info(f"✅ Claim {claim_id}: {result.verdict} ({result.confidence}%)")

    async def _score_sources(
        self, claim_id: int, domains: List[str]
    ) -> Optional[List[SourceCredibility]]:
        """Credibility for ``domains``; None leaves the claim's sources as they are."""
        try:
            response = _as_object(
                await self._api.score_sources({"claim_id": claim_id, "domains": domains})
            )
        except Exception as e:
            if not self._tolerate_source_failures:
                raise
            logger.warning(f"⚠️ Source credibility failed for claim {claim_id}, keeping sources: {e}")
            return None

        raw_sources = response.get("sources")
        if not isinstance(raw_sources, list):
            return None
        return [
            source
            for source in (SourceCredibility.from_raw(raw) for raw in raw_sources)
            if source is not None
        ]

    @staticmethod
    def _merged_checks(
        session: FactCheckSession,
        claim: ProcessedClaim,
        update: Optional[ClaimCheck],
    ) -> Optional[ClaimCheck]:
        stored = session.get_claim(claim.id) or claim
        existing = stored.claim_checks
        if existing is None:
            return update
        return existing.merged(update)

    @staticmethod
    def _merge(
        session: FactCheckSession,
        generation: int,
        claim_id: int,
        **fields: Any,
    ) -> Optional[ProcessedClaim]:
        # A newer submission has replaced the claims this run belongs to
        if session.generation != generation:
            return None
        return session.merge_claim(claim_id, **fields)
