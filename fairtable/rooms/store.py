from __future__ import annotations

import secrets
import string
import uuid
from datetime import datetime, timezone

from ..resolution.errors import RoomNotFound
from ..resolution.models import Member, ResolutionResult
from .models import Room, RoomLocation, RoomStatus

_rooms: dict[str, Room] = {}
_results: dict[str, dict[str, ResolutionResult]] = {}

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_LENGTH = 6


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_room(location: RoomLocation, members: list[Member]) -> Room:
    now = _now()
    room = Room(
        id=uuid.uuid4().hex,
        code="".join(secrets.choice(_CODE_ALPHABET) for _ in range(_CODE_LENGTH)),
        location=location,
        members={member.id: member for member in members},
        created_at=now,
        updated_at=now,
    )
    _rooms[room.id] = room
    return room


def get_room(room_id: str) -> Room | None:
    return _rooms.get(room_id)


def require_room(room_id: str) -> Room:
    room = _rooms.get(room_id)
    if room is None:
        raise RoomNotFound(room_id)
    return room


def set_room_status(
    room_id: str,
    status: RoomStatus,
    latest_result_id: str | None = None,
) -> Room:
    """Replace the stored room with one carrying *status*."""
    room = require_room(room_id)
    update: dict = {"status": status, "updated_at": _now()}
    if latest_result_id is not None:
        update["latest_result_id"] = latest_result_id
    room = room.model_copy(update=update)
    _rooms[room_id] = room
    return room


def save_result(room_id: str, result: ResolutionResult) -> None:
    _results.setdefault(room_id, {})[result.id] = result


def get_result(room_id: str, result_id: str) -> ResolutionResult | None:
    return _results.get(room_id, {}).get(result_id)


def clear_rooms() -> None:
    _rooms.clear()
    _results.clear()
