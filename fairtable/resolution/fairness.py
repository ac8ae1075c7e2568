from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig


@dataclass(frozen=True)
class FairnessMetrics:
    final_score: float
    mean_score: float
    fairness_score: float
    variance: float
    min_user_score: float
    floor_penalty: float
    rating_bonus: float


def low_floor_penalty(
    min_user_score: float,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> float:
    threshold = config.weights.low_floor_threshold
    if min_user_score >= threshold:
        return 0.0
    return (threshold - min_user_score) / threshold


def rating_bonus(
    rating: float | None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> float:
    if not rating:
        return 0.0
    return min(rating / 5.0, 1.0) * config.weights.rating_bonus_cap


def aggregate_scores(
    totals: list[float],
    rating: float | None = None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> FairnessMetrics:
    """
    Combine per-member totals for one candidate into a fairness-aware score.

    ``final = mean - 0.6 * variance - 0.4 * floor_penalty + rating_bonus``
    with population variance and a rating bonus capped at 0.05.
    """
    if not totals:
        return FairnessMetrics(0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0)

    scores = np.asarray(totals, dtype=float)
    mean = float(scores.mean())
    variance = float(scores.var())  # ddof=0
    min_user = float(scores.min())

    w = config.weights
    penalty = low_floor_penalty(min_user, config)
    bonus = rating_bonus(rating, config)
    final = mean - w.variance_penalty * variance - w.low_floor_penalty * penalty + bonus

    return FairnessMetrics(
        final_score=final,
        mean_score=mean,
        fairness_score=float(np.clip(1.0 - variance, 0.0, 1.0)),
        variance=variance,
        min_user_score=min_user,
        floor_penalty=penalty,
        rating_bonus=bonus,
    )
