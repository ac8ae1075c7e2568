from __future__ import annotations

import re

from .models import Candidate

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def fold_text(value: str) -> str:
    """Lower-case, turn every punctuation run into a single space, trim."""
    return _NON_ALNUM.sub(" ", value.lower()).strip()


def searchable_text(candidate: Candidate) -> str:
    """Name, address and category tags of a candidate as one folded string."""
    return fold_text(" ".join([candidate.name, candidate.address or "", *candidate.types]))


def contains_any(haystack: str, terms: list[str] | tuple[str, ...]) -> bool:
    return any(term in haystack for term in terms)
