"""Domain models for extracted and processed claims."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .verification import ClaimCheck, EvidenceResult, SourceCredibility


class ExtractedClaim(BaseModel):
    """A single factual assertion found in the submitted input."""

    id: int = Field(..., ge=1, description="Display-order identifier, unique within a session")
    short_claim: str = Field(..., min_length=1, description="Canonical claim statement")
    entities: List[str] = Field(default_factory=list, description="Named entities mentioned")
    possible_dates: List[str] = Field(default_factory=list, description="Unvalidated date-like strings")
    claim_type: str = Field(default="unknown", description="Free-form classification tag")
    original_text_excerpt: str = Field(default="", description="Excerpt of the source input")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "short_claim": "The moon is made of cheese",
                "entities": ["moon"],
                "possible_dates": [],
                "claim_type": "scientific",
                "original_text_excerpt": "The moon is made of cheese",
            }
        },
    )


class ProcessedClaim(ExtractedClaim):
    """An extracted claim plus whatever the evidence checks have produced so far.

    Orchestration status lives in ``FactCheckSession.statuses``.
    """

    sources: Optional[List[SourceCredibility]] = None
    claim_checks: Optional[ClaimCheck] = None
    evidence_result: Optional[EvidenceResult] = None
