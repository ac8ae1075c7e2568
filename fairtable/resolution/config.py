from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FairnessWeights:
    cuisine: float = 0.4
    vibe: float = 0.2
    budget_comfort: float = 0.2
    distance_comfort: float = 0.2
    variance_penalty: float = 0.6
    low_floor_penalty: float = 0.4
    rating_bonus_cap: float = 0.05
    low_floor_threshold: float = 0.35


@dataclass(frozen=True)
class ResolutionConfig:
    """
    Tunable policy for one process.

    Sub-score constants are product policy rather than correctness-critical
    values; only the weights in ``FairnessWeights`` feed the final score.
    """

    weights: FairnessWeights = field(default_factory=FairnessWeights)

    # Member scorer
    neutral_cuisine_score: float = 0.7
    vibe_hit_score: float = 1.0
    vibe_miss_score: float = 0.2
    casual_vibe_miss_score: float = 0.5
    budget_comfort_floor: float = 0.6
    unknown_price_comfort: float = 0.65
    distance_comfort_floor: float = 0.2
    unknown_distance_comfort: float = 0.6

    # Trade-off heuristics
    uneven_variance_threshold: float = 0.05
    low_comfort_threshold: float = 0.45
    low_rating_threshold: float = 4.0
    high_price_level: int = 3
    max_tradeoffs: int = 3

    # Enrichment and input policy
    top_k: int = 3
    require_anchor: bool = False
    score_precision: int = 4


DEFAULT_RESOLUTION_CONFIG = ResolutionConfig()
