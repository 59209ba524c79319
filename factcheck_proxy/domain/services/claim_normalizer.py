"""Normalization of loosely shaped extraction results into canonical claims.

The extraction agent is not consistent about where it puts its claim list.
``normalize_claims`` tries a fixed, ordered chain of probes and takes the
first one that yields claims:

1. a non-empty list under ``claims``, ``results`` or ``items``
2. a JSON document embedded in ``output.text`` or ``text``: either a list,
   an object holding one of the known list keys, or a single claim object
3. a synthetic claim built from the submitted text
"""

import json
import logging
import math
from numbers import Real
from typing import Any, Callable, List, Optional, Sequence

from ..models.claim import ProcessedClaim

logger = logging.getLogger(__name__)

CLAIM_LIST_KEYS = ("claims", "results", "items")
FALLBACK_CLAIM_CHARS = 1000
FALLBACK_EXCERPT_CHARS = 300
REPR_CHARS = 200


def _as_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(raw)


def _first_present(raw: Any, *keys: str) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def normalize_claim(raw: Any, index: int) -> Optional[ProcessedClaim]:
    """Coerce one raw claim into the canonical shape.

    Args:
        raw: Claim as found upstream (usually a dict, sometimes a bare string)
        index: 0-based position, used as the id when none is given

    Returns:
        The claim, or None if no claim text can be recovered at all
    """
    raw_id = raw.get("id") if isinstance(raw, dict) else None
    if (
        isinstance(raw_id, Real)
        and not isinstance(raw_id, bool)
        and (not isinstance(raw_id, float) or math.isfinite(raw_id))
        and raw_id >= 1
    ):
        claim_id = int(raw_id)
    else:
        claim_id = index + 1

    fallback = _as_text(raw)[:REPR_CHARS].strip()
    short_claim = _first_present(raw, "short_claim", "claim", "text") or fallback
    if not short_claim:
        return None

    return ProcessedClaim(
        id=claim_id,
        short_claim=short_claim,
        entities=_string_list(raw.get("entities") if isinstance(raw, dict) else None),
        possible_dates=_string_list(raw.get("possible_dates") if isinstance(raw, dict) else None),
        claim_type=_first_present(raw, "claim_type", "type") or "unknown",
        original_text_excerpt=(
            _first_present(raw, "original_text_excerpt", "excerpt", "text") or fallback
        ),
    )


def _listed_claims(container: Any) -> Optional[list]:
    """First non-empty list under one of the known keys."""
    if not isinstance(container, dict):
        return None
    for key in CLAIM_LIST_KEYS:
        value = container.get(key)
        if isinstance(value, list) and value:
            return value
    return None


def _embedded_text(run_result: Any) -> str:
    if not isinstance(run_result, dict):
        return run_result.strip() if isinstance(run_result, str) else ""
    output = run_result.get("output")
    text = output.get("text") if isinstance(output, dict) else None
    if text is None:
        text = run_result.get("text")
    return "" if text is None else str(text).strip()


def _embedded_claims(run_result: Any) -> Optional[list]:
    """Claims from a JSON document embedded in a text field."""
    text = _embedded_text(run_result)
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    if isinstance(parsed, list):
        return parsed or None
    if isinstance(parsed, dict):
        return _listed_claims(parsed) or [parsed]
    return None


def _with_unique_ids(claims: List[ProcessedClaim]) -> List[ProcessedClaim]:
    """Renumber repeated ids past the highest one seen, keeping order."""
    seen = set()
    next_id = max(claim.id for claim in claims) + 1
    unique = []
    for claim in claims:
        if claim.id in seen:
            claim = claim.model_copy(update={"id": next_id})
            next_id += 1
        seen.add(claim.id)
        unique.append(claim)
    return unique


Probe = Callable[[Any], Optional[list]]

PROBES: Sequence[Probe] = (_listed_claims, _embedded_claims)


def fallback_claim(fallback_input: str) -> ProcessedClaim:
    """Single synthetic claim standing in for the whole input."""
    trimmed = fallback_input.strip()
    return ProcessedClaim(
        id=1,
        short_claim=trimmed[:FALLBACK_CLAIM_CHARS] or "(empty input)",
        original_text_excerpt=trimmed[:FALLBACK_EXCERPT_CHARS],
    )


def normalize_claims(run_result: Any, fallback_input: str) -> List[ProcessedClaim]:
    """Map an extraction response onto an ordered list of canonical claims.

    Never returns an empty list.
    """
    for probe in PROBES:
        raw_claims = probe(run_result)
        if not raw_claims:
            continue
        claims = [
            claim
            for claim in (normalize_claim(raw, i) for i, raw in enumerate(raw_claims))
            if claim is not None
        ]
        if claims:
            logger.debug(f"{probe.__name__} recovered {len(claims)} claims")
            return _with_unique_ids(claims)

    logger.info("No structured claims in extraction result, using the input as a single claim")
    return [fallback_claim(fallback_input)]
