from __future__ import annotations

import asyncio
import logging

from ..resolution.models import NarrativeRequest, RankedRestaurant
from .config import DEFAULT_LLM_CONFIG, LLMConfig
from .groq_client import explain_choice, fallback_explanation

logger = logging.getLogger(__name__)


async def _explain_one(
    restaurant: RankedRestaurant,
    eliminated_count: int,
    config: LLMConfig,
) -> tuple[str, bool]:
    """Return ``(explanation, used_fallback)``; never raises for service failures."""
    request = NarrativeRequest(
        name=restaurant.name,
        mean_score=restaurant.mean_score,
        fairness_score=restaurant.fairness_score,
        eliminated_count=eliminated_count,
        key_tradeoffs=list(restaurant.key_tradeoffs),
    )
    try:
        text = await asyncio.wait_for(explain_choice(request, config), timeout=config.timeout)
    except asyncio.TimeoutError:
        logger.warning("Explanation for %s timed out after %.1fs", restaurant.name, config.timeout)
        text = ""
    except Exception:
        logger.warning("Explanation for %s failed", restaurant.name, exc_info=True)
        text = ""

    if text:
        return text, False
    return fallback_explanation(restaurant.name, restaurant.fairness_score, restaurant.mean_score), True


async def enrich_top_results(
    ranked: list[RankedRestaurant],
    eliminated_count: int,
    top_k: int = 3,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> int:
    """
    Attach explanations to the first *top_k* entries of *ranked*, concurrently.

    Explanations are written only after every call has settled, so a
    cancelled run leaves *ranked* untouched. Order and scores never change.
    Returns how many explanations came from the local fallback.
    """
    top = ranked[:top_k]
    if not top:
        return 0

    outcomes = await asyncio.gather(
        *(_explain_one(restaurant, eliminated_count, config) for restaurant in top)
    )

    fallbacks = 0
    for restaurant, (text, used_fallback) in zip(top, outcomes):
        restaurant.explanation = text
        fallbacks += used_fallback
    return fallbacks
