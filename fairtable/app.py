from __future__ import annotations

from fastapi import FastAPI, HTTPException

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .resolution.errors import DirectoryError, InvalidResolutionInput, RoomNotFound
from .resolution.models import ResolutionResult, ResolveRequest
from .resolution.pipeline import resolve, resolve_room
from .rooms.models import (
    CreateRoomRequest,
    ResolveRoomRequest,
    ResolveRoomResponse,
    Room,
)
from .rooms.store import create_room, get_result, get_room

app = FastAPI(title="FairTable Group Resolution API", version="1.0.0")


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, RoomNotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidResolutionInput):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, DirectoryError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail="Resolution failed")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/resolve",
    response_model=ResolutionResult,
    response_model_exclude_none=True,
)
async def resolve_snapshot(body: ResolveRequest) -> ResolutionResult:
    """Resolve a caller-supplied snapshot: anchor, members and raw listings."""
    try:
        return await resolve(body)
    except (InvalidResolutionInput, DirectoryError) as exc:
        raise _to_http_error(exc) from exc


# ── Room endpoints ───────────────────────────────────────────────────────


@app.post("/rooms", response_model=Room, status_code=201)
def create_room_endpoint(body: CreateRoomRequest) -> Room:
    return create_room(body.location, body.members)


@app.get("/rooms/{room_id}", response_model=Room)
def get_room_endpoint(room_id: str) -> Room:
    room = get_room(room_id)
    if room is None:
        raise _to_http_error(RoomNotFound(room_id))
    return room


@app.post(
    "/rooms/{room_id}/resolve",
    response_model=ResolveRoomResponse,
    response_model_exclude_none=True,
)
async def resolve_room_endpoint(
    room_id: str,
    body: ResolveRoomRequest | None = None,
) -> ResolveRoomResponse:
    include_explanations = body.include_explanations if body else True
    try:
        return await resolve_room(room_id, include_explanations=include_explanations)
    except (RoomNotFound, InvalidResolutionInput, DirectoryError) as exc:
        raise _to_http_error(exc) from exc


@app.get(
    "/rooms/{room_id}/results/{result_id}",
    response_model=ResolutionResult,
    response_model_exclude_none=True,
)
def get_result_endpoint(room_id: str, result_id: str) -> ResolutionResult:
    result = get_result(room_id, result_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Result not found: {result_id}")
    return result


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(room_id: str | None = None) -> dict:
    return compute_analytics(get_events(room_id=room_id))
