"""Domain models for credibility, claim checks and evidence results."""

import math
from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _unit_interval(value: Any) -> Optional[float]:
    """Coerce a loosely typed score into [0, 1], or None if it is not numeric."""
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return float(min(1, max(0, value)))


class VerdictTone(str, Enum):
    """Display taxonomy that verdicts and credibility scores map onto."""

    SUCCESS = "success"
    DESTRUCTIVE = "destructive"
    WARNING = "warning"
    SECONDARY = "secondary"


_VERDICT_TONES: Dict[str, VerdictTone] = {
    "true": VerdictTone.SUCCESS,
    "mostly true": VerdictTone.SUCCESS,
    "false": VerdictTone.DESTRUCTIVE,
    "likely false": VerdictTone.DESTRUCTIVE,
    "mostly false": VerdictTone.DESTRUCTIVE,
    "mixed": VerdictTone.WARNING,
    "unverified": VerdictTone.WARNING,
    "insufficient evidence": VerdictTone.WARNING,
}


def verdict_tone(verdict: str) -> VerdictTone:
    """Map an opaque upstream verdict onto the display taxonomy."""
    return _VERDICT_TONES.get(verdict.strip().lower(), VerdictTone.SECONDARY)


def credibility_tone(score: float) -> VerdictTone:
    """Map a domain credibility score (0-1) onto the display taxonomy."""
    if score >= 0.8:
        return VerdictTone.SUCCESS
    elif score >= 0.5:
        return VerdictTone.WARNING
    else:
        return VerdictTone.DESTRUCTIVE


class SourceCredibility(BaseModel):
    """Credibility assessment of one domain referenced by a claim's evidence."""

    domain: str = Field(default="", description="Hostname, used as the dedup key")
    domain_cred_score: float = Field(default=0.0, ge=0.0, le=1.0, description="Credibility (0-1)")
    trust_labels: List[str] = Field(default_factory=list, description="Short tags such as 'reliable'")
    rationale: str = Field(default="", description="Why the score was given")

    # Sources handed to the verify agent may also carry evidence details
    title: Optional[str] = None
    url: Optional[str] = None
    snippet: Optional[str] = None

    @field_validator("domain_cred_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> float:
        score = _unit_interval(value)
        return 0.0 if score is None else score

    @field_validator("trust_labels", mode="before")
    @classmethod
    def _labels_as_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(label) for label in value]

    @field_validator("domain", "rationale", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("title", "url", "snippet", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["SourceCredibility"]:
        """Build from a loosely shaped upstream entry; non-objects yield None."""
        if not isinstance(raw, dict):
            return None
        return cls.model_validate(raw)

    def as_snippet(self) -> Dict[str, str]:
        """Shape this source as a snippet for the verify agent."""
        snippet = {
            "title": self.title or self.domain or None,
            "url": self.url,
            "domain": self.domain or None,
            "snippet": self.rationale or self.snippet or None,
        }
        return {key: value for key, value in snippet.items() if value is not None}


class ClaimCheck(BaseModel):
    """Logic and tonality pass over a claim.

    Every field is optional because the upstream agents may report any subset
    of them; partial checks are merged field by field.
    """

    logical_score: Optional[float] = Field(None, description="Logical consistency (0-1)")
    logical_issue: Optional[str] = Field(None, description="Detected inconsistency, if any")
    tonality_score: Optional[float] = Field(None, description="Emotional loading (0-1, higher = more loaded)")
    tonality_flags: Optional[List[str]] = Field(None, description="Tonality tags")
    short_reason: Optional[str] = Field(None, description="Summary of the tonality assessment")

    model_config = ConfigDict(extra="ignore")

    @field_validator("logical_score", "tonality_score", mode="before")
    @classmethod
    def _clamp_scores(cls, value: Any) -> Optional[float]:
        return _unit_interval(value)

    @field_validator("logical_issue", "short_reason", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("tonality_flags", mode="before")
    @classmethod
    def _flags(cls, value: Any) -> Optional[List[str]]:
        if not isinstance(value, list):
            return None
        return [str(flag) for flag in value]

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ClaimCheck"]:
        """Build from an upstream ``claim_checks`` object; anything else yields None."""
        if not isinstance(raw, dict):
            return None
        return cls.model_validate(raw)

    def merged(self, update: Optional["ClaimCheck"]) -> "ClaimCheck":
        """Return a copy with every field present in ``update`` taking precedence."""
        if update is None:
            return self
        return self.model_copy(update=update.model_dump(exclude_none=True))

    @property
    def logical_percent(self) -> Optional[int]:
        """Logical consistency as a display percentage."""
        if self.logical_score is None:
            return None
        return round(self.logical_score * 100)

    @property
    def tonality_percent(self) -> Optional[int]:
        """Tonality shown inverted: 100% means neutral language."""
        if self.tonality_score is None:
            return None
        return round((1 - self.tonality_score) * 100)


class EvidenceItem(BaseModel):
    """A quoted passage supporting or refuting a claim."""

    title: str = ""
    url: str = ""
    snippet: str = ""

    @classmethod
    def from_raw(cls, raw: Any) -> "EvidenceItem":
        if not isinstance(raw, dict):
            return cls()
        title = raw.get("title") or raw.get("domain") or ""
        snippet = raw.get("snippet") or raw.get("rationale") or ""
        return cls(title=str(title), url=str(raw.get("url") or ""), snippet=str(snippet))


class EvidenceResult(BaseModel):
    """Terminal output of one evidence orchestration run."""

    claim: str = Field(..., description="Canonical restatement of the claim")
    verdict: str = Field(..., description="Opaque upstream verdict")
    confidence: int = Field(..., ge=0, le=100, description="Confidence percentage")
    supporting_evidence: List[EvidenceItem] = Field(default_factory=list)
    refuting_evidence: List[EvidenceItem] = Field(default_factory=list)
    explanation: str = ""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "claim": "The moon is made of cheese",
                "verdict": "False",
                "confidence": 97,
                "supporting_evidence": [],
                "refuting_evidence": [
                    {
                        "title": "Moon - NASA Science",
                        "url": "https://science.nasa.gov/moon/",
                        "snippet": "The Moon is a rocky body...",
                    }
                ],
                "explanation": "Lunar samples show the moon is rock.",
            }
        },
    )

    @property
    def tone(self) -> VerdictTone:
        return verdict_tone(self.verdict)

    @classmethod
    def error(cls, claim_text: str, reason: str) -> "EvidenceResult":
        """Error record stored when an orchestration run fails."""
        return cls(
            claim=claim_text,
            verdict="error",
            confidence=0,
            explanation=reason,
        )
