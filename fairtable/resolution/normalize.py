from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Iterable

from pydantic import ValidationError

from .models import Candidate

logger = logging.getLogger(__name__)

_STALE_MARKERS = re.compile(r"\(old listing\)|\bold listing\b")
_WHITESPACE = re.compile(r"\s+")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9 ]")


@dataclass(frozen=True)
class NormalizedPool:
    candidates: list[Candidate]
    dropped: int = 0
    duplicates: int = 0
    dropped_ids: list[str] = field(default_factory=list)


def normalize_listing_text(value: str) -> str:
    """Fold an address or name into a dedup key fragment."""
    text = _STALE_MARKERS.sub("", value.lower())
    text = _WHITESPACE.sub(" ", text)
    text = _NON_KEY_CHARS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def dedup_key(candidate: Candidate) -> str:
    address = normalize_listing_text(candidate.address or "")
    if address:
        return f"address:{address}"
    return f"name:{normalize_listing_text(candidate.name)}"


def quality_score(candidate: Candidate) -> float:
    return (
        (candidate.rating or 0.0) * 10
        + (candidate.user_ratings_total or 0) / 100
        + (2 if candidate.price_level is not None else 0)
        + (1 if candidate.is_open_now else 0)
    )


def parse_listing(raw: Any) -> Candidate | None:
    """Validate one raw listing; ``None`` when it is not a usable candidate."""
    if isinstance(raw, Candidate):
        return raw
    if not isinstance(raw, dict):
        logger.warning("Dropping malformed listing of type %s", type(raw).__name__)
        return None
    try:
        return Candidate.model_validate(raw)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        logger.warning(
            "Dropping malformed listing %r: invalid %s",
            raw.get("placeId") or raw.get("place_id") or raw.get("name"),
            ", ".join(fields),
        )
        return None


def _keep_best(best: dict[str, Candidate], candidate: Candidate) -> dict[str, Candidate]:
    key = dedup_key(candidate)
    existing = best.get(key)
    # Ties keep the listing seen first.
    if existing is None or quality_score(candidate) > quality_score(existing):
        best[key] = candidate
    return best


def normalize_candidates(raw_listings: Iterable[Any]) -> NormalizedPool:
    """
    Turn raw directory listings into a deduplicated candidate set.

    Listings missing an id, a name or a coordinate are dropped and logged;
    they are never reported as eliminations.
    """
    raw = list(raw_listings)
    parsed = [(item, parse_listing(item)) for item in raw]
    valid = [candidate for _, candidate in parsed if candidate is not None]
    dropped_ids = [
        str(item.get("placeId") or item.get("place_id") or "") if isinstance(item, dict) else ""
        for item, candidate in parsed
        if candidate is None
    ]

    deduped = reduce(_keep_best, valid, {})
    candidates = list(deduped.values())

    logger.info(
        "Normalized listings: raw=%d dropped=%d duplicates=%d kept=%d",
        len(raw),
        len(dropped_ids),
        len(valid) - len(candidates),
        len(candidates),
    )
    return NormalizedPool(
        candidates=candidates,
        dropped=len(dropped_ids),
        duplicates=len(valid) - len(candidates),
        dropped_ids=dropped_ids,
    )
