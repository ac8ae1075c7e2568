from __future__ import annotations

import logging

from groq import AsyncGroq

from ..resolution.models import NarrativeRequest
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You explain restaurant choices to a group of friends. "
    "Be friendly, concise and playful, and emphasize fairness and compromise. "
    "Keep it to 2 short sentences max. "
    "Reply with the explanation only, no lists or headings."
)


def _build_user_message(request: NarrativeRequest) -> str:
    tradeoffs = " | ".join(request.key_tradeoffs) if request.key_tradeoffs else "none"
    return "\n".join([
        f"Restaurant: {request.name}",
        f"Mean score: {request.mean_score:.3f}",
        f"Fairness score: {request.fairness_score:.3f}",
        f"Eliminated count: {request.eliminated_count}",
        f"Key tradeoffs: {tradeoffs}",
    ])


def fallback_explanation(name: str, fairness_score: float, mean_score: float) -> str:
    """Deterministic stand-in used whenever the narrative service fails."""
    return (
        f"{name} balances the group well with a {fairness_score:.2f} fairness score "
        f"and a {mean_score:.2f} average match."
    )


async def explain_choice(
    request: NarrativeRequest,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str:
    """
    Ask Groq for a one-to-two sentence explanation of a ranked pick.

    Returns an empty string on any failure (API error, empty or non-text
    content). Wait time is bounded by the caller.
    """
    if not config.enabled or not config.api_key:
        return ""

    try:
        async with AsyncGroq(
            api_key=config.api_key, timeout=config.timeout, max_retries=0
        ) as client:
            response = await client.chat.completions.create(
                model=config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": _build_user_message(request)},
                ],
                max_tokens=config.max_tokens,
                temperature=config.temperature,
            )

        content = response.choices[0].message.content
        if not isinstance(content, str):
            logger.warning("Groq returned non-text content for %s", request.name)
            return ""
        return content.strip()

    except Exception:
        logger.warning("Groq explanation failed for %s, using fallback", request.name, exc_info=True)
        return ""
