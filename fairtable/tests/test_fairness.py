from __future__ import annotations

import pytest

from fairtable.resolution.config import FairnessWeights, ResolutionConfig
from fairtable.resolution.fairness import aggregate_scores, low_floor_penalty, rating_bonus


def test_population_variance_and_mean():
    metrics = aggregate_scores([0.2, 0.8])

    assert metrics.mean_score == pytest.approx(0.5)
    assert metrics.variance == pytest.approx(0.09)  # not the sample variance 0.18
    assert metrics.fairness_score == pytest.approx(0.91)
    assert metrics.min_user_score == pytest.approx(0.2)


def test_final_score_formula():
    metrics = aggregate_scores([0.2, 0.8], rating=4.0)

    penalty = (0.35 - 0.2) / 0.35
    expected = 0.5 - 0.6 * 0.09 - 0.4 * penalty + 0.04
    assert metrics.floor_penalty == pytest.approx(penalty)
    assert metrics.rating_bonus == pytest.approx(0.04)
    assert metrics.final_score == pytest.approx(expected)


def test_single_member_is_perfectly_fair():
    metrics = aggregate_scores([0.73])

    assert metrics.variance == 0.0
    assert metrics.fairness_score == 1.0
    assert metrics.final_score == pytest.approx(0.73)


class TestLowFloorPenalty:
    def test_inactive_at_threshold(self):
        assert low_floor_penalty(0.35) == 0.0

    def test_inactive_above_threshold(self):
        assert low_floor_penalty(0.9) == 0.0

    def test_scales_linearly_to_one(self):
        assert low_floor_penalty(0.175) == pytest.approx(0.5)
        assert low_floor_penalty(0.0) == pytest.approx(1.0)

    def test_threshold_is_configurable(self):
        config = ResolutionConfig(weights=FairnessWeights(low_floor_threshold=0.25))
        assert low_floor_penalty(0.3) > 0.0
        assert low_floor_penalty(0.3, config) == 0.0


class TestRatingBonus:
    def test_capped_at_five_hundredths(self):
        assert rating_bonus(5.0) == pytest.approx(0.05)

    def test_proportional_to_rating(self):
        assert rating_bonus(2.5) == pytest.approx(0.025)

    def test_missing_rating_earns_nothing(self):
        assert rating_bonus(None) == 0.0
        assert rating_bonus(0.0) == 0.0


def test_rating_never_outweighs_a_fairness_gap():
    balanced = aggregate_scores([0.6, 0.6], rating=None)
    lopsided = aggregate_scores([0.3, 0.9], rating=5.0)

    assert balanced.final_score > lopsided.final_score


def test_lower_variance_ranks_at_least_as_high_for_equal_means():
    even = aggregate_scores([0.5, 0.5, 0.5])
    uneven = aggregate_scores([0.4, 0.5, 0.6])

    assert even.mean_score == pytest.approx(uneven.mean_score)
    assert even.variance < uneven.variance
    assert even.final_score >= uneven.final_score


def test_fairness_score_is_clamped():
    # Variance of totals in [0, 1] never exceeds 0.25, but the clamp still holds
    metrics = aggregate_scores([0.0, 1.0])
    assert 0.0 <= metrics.fairness_score <= 1.0


def test_aggregation_is_deterministic():
    totals = [0.41, 0.77, 0.63, 0.58]
    assert aggregate_scores(totals, 4.3) == aggregate_scores(totals, 4.3)
