from __future__ import annotations

from .config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig
from .constraints import Survivor
from .fairness import FairnessMetrics, aggregate_scores
from .models import Candidate, Member, RankedRestaurant
from .scoring import score_survivor


def build_tradeoffs(
    candidate: Candidate,
    metrics: FairnessMetrics,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> list[str]:
    """At most ``max_tradeoffs`` notes, in check order."""
    tradeoffs: list[str] = []

    if metrics.variance > config.uneven_variance_threshold:
        tradeoffs.append("uneven satisfaction across members")
    if metrics.min_user_score < config.low_comfort_threshold:
        tradeoffs.append("low comfort for someone in the group")
    if candidate.rating is not None and candidate.rating < config.low_rating_threshold:
        tradeoffs.append("lower public rating than top alternatives")
    if candidate.price_level is not None and candidate.price_level >= config.high_price_level:
        tradeoffs.append("higher price point")

    return tradeoffs[: config.max_tradeoffs]


def build_ranked_restaurant(
    survivor: Survivor,
    members: list[Member],
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> RankedRestaurant:
    candidate = survivor.candidate
    user_scores = score_survivor(survivor, members, config)
    metrics = aggregate_scores(
        [breakdown.total for breakdown in user_scores.values()],
        candidate.rating,
        config,
    )

    digits = config.score_precision
    return RankedRestaurant(
        **candidate.model_dump(),
        final_score=round(metrics.final_score, digits),
        mean_score=round(metrics.mean_score, digits),
        fairness_score=round(metrics.fairness_score, digits),
        variance=round(metrics.variance, digits),
        min_user_score=round(metrics.min_user_score, digits),
        user_scores=user_scores,
        key_tradeoffs=build_tradeoffs(candidate, metrics, config),
    )


def rank_survivors(
    survivors: list[Survivor],
    members: list[Member],
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> list[RankedRestaurant]:
    """
    Score and order survivors by final score, best first.

    ``sorted`` is stable, so candidates with equal final scores keep the
    order in which they reached the ranker. That order is part of the
    contract: no further tie-break is applied.
    """
    ranked = [build_ranked_restaurant(s, members, config) for s in survivors]
    return sorted(ranked, key=lambda r: r.final_score, reverse=True)
