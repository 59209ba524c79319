"""In-memory state of one fact-check interaction."""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from .claim import ProcessedClaim

logger = logging.getLogger(__name__)


class ClaimStatus(str, Enum):
    """Orchestration status of a single claim."""

    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class InputType(str, Enum):
    """What kind of input the user submitted."""

    TEXT = "text"
    URL = "url"


SessionListener = Callable[["FactCheckSession"], None]


class FactCheckSession(BaseModel):
    """Claims, score and per-claim orchestration status for one submission.

    A new submission replaces the claim list wholesale; evidence checks merge
    their results into individual claims by id.
    """

    input_text: str = ""
    input_type: InputType = InputType.TEXT
    claims: List[ProcessedClaim] = Field(default_factory=list)
    overall_score: Optional[int] = None
    statuses: Dict[int, ClaimStatus] = Field(default_factory=dict)
    is_extracting: bool = False
    is_analyzing: bool = False
    generation: int = 0

    _listeners: List[SessionListener] = PrivateAttr(default_factory=list)

    def subscribe(self, listener: SessionListener) -> None:
        """Register a callback invoked after every state change."""
        self._listeners.append(listener)

    def notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning(f"⚠️ Session listener failed: {e}")

    def reset(self) -> None:
        """Discard the previous submission's claims and score."""
        self.generation += 1
        self.claims = []
        self.statuses = {}
        self.overall_score = None
        self.notify()

    def replace_claims(self, claims: List[ProcessedClaim]) -> None:
        self.claims = list(claims)
        self.statuses = {claim.id: ClaimStatus.IDLE for claim in self.claims}
        self.notify()

    def get_claim(self, claim_id: int) -> Optional[ProcessedClaim]:
        for claim in self.claims:
            if claim.id == claim_id:
                return claim
        return None

    def merge_claim(self, claim_id: int, **fields: Any) -> Optional[ProcessedClaim]:
        """Update the named fields of one claim, leaving every other claim untouched.

        Returns the updated claim, or None if no claim has that id (for example
        because a new submission replaced the list mid-run).
        """
        for index, claim in enumerate(self.claims):
            if claim.id == claim_id:
                updated = claim.model_copy(update=fields)
                self.claims[index] = updated
                self.notify()
                return updated
        logger.warning(f"⚠️ Ignoring update for unknown claim {claim_id}")
        return None

    def status_of(self, claim_id: int) -> ClaimStatus:
        return self.statuses.get(claim_id, ClaimStatus.IDLE)

    def set_status(self, claim_id: int, status: ClaimStatus) -> None:
        self.statuses[claim_id] = status
        self.notify()

    def is_checking(self, claim_id: int) -> bool:
        return self.status_of(claim_id) is ClaimStatus.RUNNING
