from __future__ import annotations

from .config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig
from .constraints import Survivor
from .models import Member, MemberPreferences, ScoreBreakdown, Vibe
from .text import contains_any, fold_text, searchable_text

VIBE_KEYWORDS: dict[Vibe, tuple[str, ...]] = {
    Vibe.quiet: ("quiet", "cozy", "cafe", "coffee", "bakery", "tea", "bistro", "library"),
    Vibe.hype: ("bar", "night club", "pub", "club", "live music", "karaoke", "lounge"),
    Vibe.aesthetic: ("trendy", "brunch", "rooftop", "cocktail", "dessert", "wine", "gallery"),
    Vibe.casual: ("casual", "diner", "fast food", "takeout", "meal takeaway", "pizza", "burger", "sandwich"),
}


def cuisine_score(
    haystack: str,
    cuisines: list[str],
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> float:
    wanted = [c for c in (fold_text(c) for c in cuisines) if c]
    if not wanted:
        return config.neutral_cuisine_score
    matches = sum(1 for c in wanted if c in haystack)
    return matches / len(wanted)


def vibe_score(
    haystack: str,
    vibe: Vibe,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> float:
    if contains_any(haystack, VIBE_KEYWORDS[vibe]):
        return config.vibe_hit_score
    if vibe is Vibe.casual:
        return config.casual_vibe_miss_score
    return config.vibe_miss_score


def budget_comfort_score(
    price_level: int | None,
    budget_max: int,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> float:
    """Floor at the ceiling, rising to 1.0 for a free listing."""
    if price_level is None:
        return config.unknown_price_comfort
    if price_level > budget_max:
        return 0.0
    if budget_max == 0:
        return config.budget_comfort_floor
    slack = (budget_max - price_level) / budget_max
    floor = config.budget_comfort_floor
    return floor + (1.0 - floor) * slack


def distance_comfort_score(
    distance_meters: float | None,
    max_distance_meters: float,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> float:
    """1.0 on top of the anchor, falling linearly to the floor at the member's limit."""
    if distance_meters is None:
        return config.unknown_distance_comfort
    if distance_meters > max_distance_meters:
        return 0.0
    if max_distance_meters <= 0:
        return config.distance_comfort_floor
    floor = config.distance_comfort_floor
    return floor + (1.0 - floor) * (1.0 - distance_meters / max_distance_meters)


def score_member(
    survivor: Survivor,
    preferences: MemberPreferences,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
    haystack: str | None = None,
) -> ScoreBreakdown:
    candidate = survivor.candidate
    if haystack is None:
        haystack = searchable_text(candidate)

    cuisine = cuisine_score(haystack, preferences.cuisine_preferences, config)
    vibe = vibe_score(haystack, preferences.vibe_preference, config)
    budget = budget_comfort_score(candidate.price_level, preferences.budget_max, config)
    distance = distance_comfort_score(
        survivor.distance_meters, preferences.max_distance_meters, config
    )

    w = config.weights
    total = (
        w.cuisine * cuisine
        + w.vibe * vibe
        + w.budget_comfort * budget
        + w.distance_comfort * distance
    )

    digits = config.score_precision
    return ScoreBreakdown(
        cuisine=round(cuisine, digits),
        vibe=round(vibe, digits),
        budget_comfort=round(budget, digits),
        distance_comfort=round(distance, digits),
        total=round(total, digits),
    )


def score_survivor(
    survivor: Survivor,
    members: list[Member],
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> dict[str, ScoreBreakdown]:
    """Breakdown per member id, in member order."""
    haystack = searchable_text(survivor.candidate)
    return {
        member.id: score_member(survivor, member.preferences, config, haystack)
        for member in members
    }
