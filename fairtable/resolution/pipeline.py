from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import Counter
from datetime import datetime, timezone

import httpx

from ..analytics.store import RESOLUTION_EVENT, record_event
from ..directory.config import DEFAULT_DIRECTORY_CONFIG, DirectoryConfig
from ..directory.places_client import fetch_listings
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.enrich import enrich_top_results
from ..rooms.models import ResolveRoomResponse, RoomStatus, RoomSummary
from ..rooms.store import require_room, save_result, set_room_status
from .config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig
from .constraints import apply_hard_constraints, reason_kind
from .errors import InvalidResolutionInput
from .models import (
    Candidate,
    Coordinate,
    Elimination,
    Member,
    RankedRestaurant,
    ResolutionResult,
    ResolveRequest,
)
from .normalize import normalize_candidates
from .ranking import rank_survivors

logger = logging.getLogger(__name__)

ADHOC_ROOM_ID = "adhoc"


def validate_members(
    members: list[Member],
    anchor: Coordinate | None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> None:
    if not members:
        raise InvalidResolutionInput("Cannot resolve a group with no members")

    ids = [member.id for member in members]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise InvalidResolutionInput(f"Duplicate member ids: {', '.join(duplicates)}")

    if anchor is None and config.require_anchor:
        raise InvalidResolutionInput(
            "Room has no anchor coordinate, so distance limits cannot be checked"
        )


def rank_candidates(
    candidates: list[Candidate],
    members: list[Member],
    anchor: Coordinate | None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> tuple[list[Elimination], list[RankedRestaurant]]:
    """
    Filter, score, aggregate and rank.

    Synchronous and free of I/O: the same snapshot always produces the same
    eliminations, order and scores.
    """
    outcome = apply_hard_constraints(candidates, anchor, members)
    ranked = rank_survivors(outcome.passing, members, config)
    return outcome.eliminations, ranked


def _record_failure(
    room_id: str,
    member_count: int,
    start_time: float,
    exc: BaseException,
    raw_count: int = 0,
) -> None:
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event(RESOLUTION_EVENT, {
        "room_id": room_id,
        "member_count": member_count,
        "raw_count": raw_count,
        "response_time_ms": elapsed_ms,
        "success": False,
        "error": type(exc).__name__,
    })


async def resolve(
    request: ResolveRequest,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ResolutionResult:
    """Run one resolution over an already-fetched raw candidate pool."""
    start_time = time.time()
    room_id = request.room_id or ADHOC_ROOM_ID

    try:
        validate_members(request.members, request.anchor, config)

        pool = normalize_candidates(request.candidates)
        eliminations, ranked = rank_candidates(
            pool.candidates, request.members, request.anchor, config
        )

        fallbacks = 0
        if request.include_explanations:
            fallbacks = await enrich_top_results(
                ranked, len(eliminations), top_k=config.top_k, config=llm_config
            )

        result = ResolutionResult(
            id=str(uuid.uuid4()),
            room_id=room_id,
            computed_at=datetime.now(timezone.utc),
            eliminated_count=len(eliminations),
            eliminations=eliminations,
            ranked_restaurants=ranked,
        )
    except Exception as exc:
        _record_failure(room_id, len(request.members), start_time, exc, len(request.candidates))
        raise

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    kinds: Counter[str] = Counter()
    for elimination in eliminations:
        kinds.update({reason_kind(r) for r in elimination.reasons})

    record_event(RESOLUTION_EVENT, {
        "room_id": room_id,
        "member_count": len(request.members),
        "raw_count": len(request.candidates),
        "dropped_count": pool.dropped,
        "dropped_ids": pool.dropped_ids,
        "duplicate_count": pool.duplicates,
        "candidate_count": len(pool.candidates),
        "eliminated_count": len(eliminations),
        "ranked_count": len(ranked),
        "elimination_kinds": dict(kinds),
        "explained_count": min(config.top_k, len(ranked)) if request.include_explanations else 0,
        "fallback_count": fallbacks,
        "response_time_ms": elapsed_ms,
        "success": True,
    })
    logger.info(
        "Resolved room %s: %d candidates, %d eliminated, %d ranked in %.1fms",
        room_id,
        len(pool.candidates),
        len(eliminations),
        len(ranked),
        elapsed_ms,
    )
    return result


async def resolve_room(
    room_id: str,
    include_explanations: bool = True,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    directory_config: DirectoryConfig = DEFAULT_DIRECTORY_CONFIG,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ResolveRoomResponse:
    """
    Resolve a stored room end to end.

    The room is marked ``resolving`` for the duration of the run and always
    leaves it as ``complete`` or ``error``.
    """
    start_time = time.time()
    room = require_room(room_id)
    members = list(room.members.values())
    anchor = room.location.anchor()
    try:
        validate_members(members, anchor, config)
    except InvalidResolutionInput as exc:
        _record_failure(room.id, len(members), start_time, exc)
        raise

    set_room_status(room.id, RoomStatus.resolving)
    logger.info("Resolving room %s with %d members", room.id, len(members))

    raw_listings: list | None = None
    try:
        raw_listings = await fetch_listings(
            room.location.label, anchor, members, directory_config, transport
        )
        result = await resolve(
            ResolveRequest(
                room_id=room.id,
                anchor=anchor,
                members=members,
                candidates=raw_listings,
                include_explanations=include_explanations,
            ),
            config,
            llm_config,
        )
        save_result(room.id, result)
        room = set_room_status(room.id, RoomStatus.complete, result.id)
    except (Exception, asyncio.CancelledError) as exc:
        logger.exception("Resolution failed for room %s", room.id)
        set_room_status(room.id, RoomStatus.error)
        # Once listings arrived, resolve() has recorded the outcome itself
        if raw_listings is None:
            _record_failure(room.id, len(members), start_time, exc)
        raise

    return ResolveRoomResponse(
        room=RoomSummary(
            id=room.id,
            code=room.code,
            status=room.status,
            latest_result_id=room.latest_result_id,
        ),
        result=result,
    )
