from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Google Places (New) reports price as an enum string rather than a tier.
PRICE_LEVEL_NAMES: dict[str, int] = {
    "PRICE_LEVEL_FREE": 0,
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}


class WireModel(BaseModel):
    """snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DietaryRestriction(str, Enum):
    vegetarian = "vegetarian"
    vegan = "vegan"
    halal = "halal"
    kosher = "kosher"
    gluten_free = "gluten_free"


class Vibe(str, Enum):
    quiet = "quiet"
    hype = "hype"
    aesthetic = "aesthetic"
    casual = "casual"


class Coordinate(WireModel):
    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)


# ── Candidates ───────────────────────────────────────────────────────────


class Candidate(WireModel):
    """A restaurant listing; immutable for the duration of one run."""

    model_config = ConfigDict(frozen=True)

    place_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price_level: int | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    types: list[str] = Field(default_factory=list)
    address: str | None = None
    lat: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    is_open_now: bool | None = None
    photo_reference: str | None = None

    @field_validator("place_id", "name", mode="before")
    @classmethod
    def _strip_required_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("price_level", mode="before")
    @classmethod
    def _coerce_price_level(cls, value: Any) -> int | None:
        if isinstance(value, str):
            if value in PRICE_LEVEL_NAMES:
                return PRICE_LEVEL_NAMES[value]
            try:
                value = int(value)
            except ValueError:
                return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value) or value != int(value) or not 0 <= value <= 4:
            return None
        return int(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value) or not 0.0 <= value <= 5.0:
            return None
        return float(value)

    @field_validator("user_ratings_total", mode="before")
    @classmethod
    def _coerce_rating_count(cls, value: Any) -> int | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value) or value < 0:
            return None
        return int(value)

    @field_validator("types", mode="before")
    @classmethod
    def _coerce_types(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [t for t in value if isinstance(t, str) and t.strip()]

    @field_validator("address", "photo_reference", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> str | None:
        if not isinstance(value, str) or not value.strip():
            return None
        return value

    @field_validator("is_open_now", mode="before")
    @classmethod
    def _coerce_open_now(cls, value: Any) -> bool | None:
        return value if isinstance(value, bool) else None


# ── Members ──────────────────────────────────────────────────────────────


class MemberPreferences(WireModel):
    budget_max: int = Field(default=2, ge=0, le=4)
    dietary_restrictions: list[DietaryRestriction] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)
    vibe_preference: Vibe = Vibe.casual
    max_distance_meters: float = Field(default=4000, ge=0)

    @field_validator("dietary_restrictions", mode="before")
    @classmethod
    def _normalize_restrictions(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        seen: list[str] = []
        for item in value:
            if isinstance(item, str):
                item = item.strip().lower().replace("-", "_").replace(" ", "_")
            if item not in seen:
                seen.append(item)
        return seen

    @field_validator("cuisine_preferences", mode="before")
    @classmethod
    def _strip_cuisines(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [c.strip() for c in value if isinstance(c, str) and c.strip()]

    @field_validator("vibe_preference", mode="before")
    @classmethod
    def _lower_vibe(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class Member(WireModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    preferences: MemberPreferences = Field(default_factory=MemberPreferences)


# ── Results ──────────────────────────────────────────────────────────────


class ScoreBreakdown(WireModel):
    model_config = ConfigDict(frozen=True)

    cuisine: float
    vibe: float
    budget_comfort: float
    distance_comfort: float
    total: float


class Elimination(WireModel):
    model_config = ConfigDict(frozen=True)

    place_id: str
    name: str
    reasons: list[str]


class RankedRestaurant(Candidate):
    # The enricher fills ``explanation`` after ranking.
    model_config = ConfigDict(frozen=False)

    final_score: float
    mean_score: float
    fairness_score: float
    variance: float
    min_user_score: float
    user_scores: dict[str, ScoreBreakdown]
    explanation: str | None = None
    key_tradeoffs: list[str] = Field(default_factory=list)


class ResolutionResult(WireModel):
    id: str
    room_id: str
    computed_at: datetime
    eliminated_count: int
    eliminations: list[Elimination]
    ranked_restaurants: list[RankedRestaurant]


class ResolveRequest(WireModel):
    room_id: str | None = None
    anchor: Coordinate | None = None
    members: list[Member] = Field(default_factory=list)
    # Raw directory listings; validated per listing by the normalizer.
    candidates: list[Any] = Field(default_factory=list)
    include_explanations: bool = True


class NarrativeRequest(BaseModel):
    """Everything the narrative service is allowed to see about a pick."""

    name: str
    mean_score: float
    fairness_score: float
    eliminated_count: int
    key_tradeoffs: list[str] = Field(default_factory=list)
