"""Service coordinating a fact-check submission end to end."""

import asyncio
import logging
import re
from numbers import Real
from typing import Any, List, Optional

from ..models.claim import ProcessedClaim
from ..models.session import ClaimStatus, FactCheckSession, InputType
from ..models.verification import ClaimCheck
from ..ports.fact_check_api import FactCheckAPI
from .claim_normalizer import normalize_claims
from .evidence_orchestrator import EvidenceOrchestrator

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://.+", re.IGNORECASE)

# Stand-in overall score shown until a real aggregate exists
PLACEHOLDER_SCORE = 72

AUTO_CHECK_DELAY = 0.65


class FactCheckError(Exception):
    """A submission could not be fact-checked at all."""


def detect_input_type(value: str) -> InputType:
    """Classify the user's input as a URL or free text."""
    return InputType.URL if URL_PATTERN.match(value.strip()) else InputType.TEXT


def _same_id(left: Any, right: Any) -> bool:
    """Loose id equality, so that ``1`` matches ``"1"``."""
    if left is None or right is None or isinstance(left, bool) or isinstance(right, bool):
        return False
    if isinstance(left, Real) and isinstance(right, Real):
        return left == right
    try:
        return float(str(left).strip()) == float(str(right).strip())
    except ValueError:
        return str(left) == str(right)


def attach_claim_checks(
    claims: List[ProcessedClaim], run_result: Any
) -> List[ProcessedClaim]:
    """Copy extractor-provided ``claim_checks`` onto the claims with matching ids."""
    if not isinstance(run_result, dict):
        return claims

    candidates = []
    for key in ("claims", "results"):
        entries = run_result.get(key)
        if isinstance(entries, list):
            candidates.extend(entry for entry in entries if isinstance(entry, dict))

    attached = []
    for claim in claims:
        meta = next(
            (
                entry
                for entry in candidates
                if _same_id(entry.get("id"), claim.id) and isinstance(entry.get("claim_checks"), dict)
            ),
            None,
        )
        checks = ClaimCheck.from_raw(meta["claim_checks"]) if meta else None
        attached.append(claim.model_copy(update={"claim_checks": checks}) if checks else claim)
    return attached


class FactCheckingService:
    """Service for coordinating fact checking.

    One call to ``submit`` extracts the claims of a piece of text, stores them
    in the session and runs the evidence checks for the first claim. Every
    other claim waits for an explicit ``check_evidence``.
    """

    def __init__(
        self,
        api: FactCheckAPI,
        orchestrator: Optional[EvidenceOrchestrator] = None,
        auto_check_delay: float = AUTO_CHECK_DELAY,
    ):
        """Initialize the service.

        Args:
            api: Client for the gateway endpoints
            orchestrator: Evidence orchestrator, built from ``api`` if omitted
            auto_check_delay: Seconds to wait before checking the first claim
        """
        self._api = api
        self._orchestrator = orchestrator or EvidenceOrchestrator(api)
        self._auto_check_delay = auto_check_delay
        logger.info("🔧 FactCheckingService initialized")

    async def submit(self, session: FactCheckSession, text: str) -> FactCheckSession:
        """Fact check a piece of text or a URL.

        Args:
            session: Session to fill; its previous claims are discarded
            text: User input

        Returns:
            The same session, holding the extracted claims

        Raises:
            FactCheckError: If extraction fails
        """
        query = text.strip()
        if not query:
            return session

        logger.info(f"🔍 Starting fact check for input: {query[:100]}...")
        session.input_text = text
        session.input_type = detect_input_type(text)
        session.reset()
        session.is_extracting = True
        session.notify()

        try:
            run_result = await self._api.extract_claims(query)
            claims = attach_claim_checks(normalize_claims(run_result, text), run_result)
            logger.info(f"📝 Extracted {len(claims)} claims")

            session.replace_claims(claims)
            session.is_extracting = False
            session.is_analyzing = True
            session.overall_score = PLACEHOLDER_SCORE
            session.notify()
        except Exception as e:
            logger.error(f"❌ Fact check failed: {e}", exc_info=True)
            session.is_extracting = False
            session.is_analyzing = False
            session.notify()
            raise FactCheckError(f"Fact check failed: {str(e) or 'unknown error'}") from e

        generation = session.generation
        try:
            await asyncio.sleep(self._auto_check_delay)
            if session.generation == generation and session.claims:
                await self.check_evidence(session, session.claims[0].id)
        finally:
            # A newer submission owns the flags now
            if session.generation == generation:
                session.is_analyzing = False
                session.notify()

        return session

    async def check_evidence(
        self, session: FactCheckSession, claim_id: int
    ) -> Optional[ProcessedClaim]:
        """Run the evidence checks for one claim, at most once.

        Returns:
            The claim's state afterwards, or None if no such claim exists
        """
        status = session.status_of(claim_id)
        if status is not ClaimStatus.IDLE:
            logger.info(f"Claim {claim_id} already {status.value}, not checking again")
            return session.get_claim(claim_id)
        return await self._orchestrator.run(session, claim_id)
