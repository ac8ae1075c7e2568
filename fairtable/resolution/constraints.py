from __future__ import annotations

from dataclasses import dataclass

from .geo import distance_to
from .models import Candidate, Coordinate, DietaryRestriction, Elimination, Member
from .text import contains_any, searchable_text

# Matched against folded text, so "gluten-free" in a listing reads "gluten free".
# "vegan" satisfies vegetarian but not the other way round.
DIETARY_SYNONYMS: dict[DietaryRestriction, tuple[str, ...]] = {
    DietaryRestriction.vegetarian: ("vegetarian", "vegan"),
    DietaryRestriction.vegan: ("vegan",),
    DietaryRestriction.halal: ("halal",),
    DietaryRestriction.kosher: ("kosher",),
    DietaryRestriction.gluten_free: ("gluten free", "celiac"),
}


@dataclass(frozen=True)
class Survivor:
    candidate: Candidate
    distance_meters: float | None


@dataclass(frozen=True)
class FilterOutcome:
    passing: list[Survivor]
    eliminations: list[Elimination]


def _format_meters(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def satisfies_dietary(haystack: str, restriction: DietaryRestriction) -> bool:
    return contains_any(haystack, DIETARY_SYNONYMS[restriction])


def member_violations(
    candidate: Candidate,
    member: Member,
    distance_meters: float | None,
    haystack: str,
) -> list[str]:
    """Human-readable reasons *member* cannot accept *candidate*."""
    prefs = member.preferences
    reasons: list[str] = []

    if candidate.price_level is not None and candidate.price_level > prefs.budget_max:
        reasons.append(
            f"{member.name}: price level {candidate.price_level} exceeds budget {prefs.budget_max}"
        )

    if distance_meters is not None and distance_meters > prefs.max_distance_meters:
        reasons.append(
            f"{member.name}: distance {round(distance_meters)}m exceeds max "
            f"{_format_meters(prefs.max_distance_meters)}m"
        )

    for restriction in prefs.dietary_restrictions:
        if not satisfies_dietary(haystack, restriction):
            label = restriction.value.replace("_", "-")
            reasons.append(f"{member.name}: does not satisfy {label}")

    return reasons


def reason_kind(reason: str) -> str:
    """``budget``, ``distance`` or ``dietary`` for a reason built above."""
    # Member names are free text; classify the detail after the last ": "
    detail = reason.rsplit(": ", 1)[-1]
    if detail.startswith("price level"):
        return "budget"
    if detail.startswith("distance"):
        return "distance"
    return "dietary"


def apply_hard_constraints(
    candidates: list[Candidate],
    anchor: Coordinate | None,
    members: list[Member],
) -> FilterOutcome:
    """
    Split candidates into survivors and eliminations.

    One violation by one member is enough to eliminate. Without an anchor the
    distance rule is skipped for everyone. Input order is preserved in both
    outputs.
    """
    passing: list[Survivor] = []
    eliminations: list[Elimination] = []

    for candidate in candidates:
        distance = distance_to(anchor, candidate)
        haystack = searchable_text(candidate)

        reasons: list[str] = []
        for member in members:
            reasons.extend(member_violations(candidate, member, distance, haystack))

        if reasons:
            eliminations.append(
                Elimination(
                    place_id=candidate.place_id,
                    name=candidate.name,
                    reasons=list(dict.fromkeys(reasons)),
                )
            )
            continue

        passing.append(Survivor(candidate=candidate, distance_meters=distance))

    return FilterOutcome(passing=passing, eliminations=eliminations)
