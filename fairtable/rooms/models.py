from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from ..resolution.models import Coordinate, Member, ResolutionResult, WireModel


class RoomStatus(str, Enum):
    lobby = "lobby"
    resolving = "resolving"
    complete = "complete"
    error = "error"


class RoomLocation(WireModel):
    label: str = ""
    lat: float = Field(default=0.0, ge=-90.0, le=90.0)
    lng: float = Field(default=0.0, ge=-180.0, le=180.0)

    def anchor(self) -> Coordinate | None:
        """(0, 0) means the room never had a coordinate set."""
        if self.lat == 0 and self.lng == 0:
            return None
        return Coordinate(lat=self.lat, lng=self.lng)


class Room(WireModel):
    id: str
    code: str
    status: RoomStatus = RoomStatus.lobby
    location: RoomLocation = Field(default_factory=RoomLocation)
    members: dict[str, Member] = Field(default_factory=dict)
    latest_result_id: str | None = None
    created_at: datetime
    updated_at: datetime


class CreateRoomRequest(WireModel):
    location: RoomLocation = Field(default_factory=RoomLocation)
    members: list[Member] = Field(default_factory=list)


class RoomSummary(WireModel):
    id: str
    code: str
    status: RoomStatus
    latest_result_id: str | None = None


class ResolveRoomRequest(WireModel):
    include_explanations: bool = True


class ResolveRoomResponse(WireModel):
    room: RoomSummary
    result: ResolutionResult
