from __future__ import annotations


class ResolutionError(Exception):
    """Base class for failures that abort a whole resolution run."""


class InvalidResolutionInput(ResolutionError):
    """Raised when the request cannot be resolved as given (no members, missing anchor)."""


class DirectoryError(ResolutionError):
    """Raised when the restaurant directory lookup fails or is not configured."""


class RoomNotFound(ResolutionError):
    """Raised when a room id is unknown to the room store."""

    def __init__(self, room_id: str):
        super().__init__(f"Room not found: {room_id}")
        self.room_id = room_id
