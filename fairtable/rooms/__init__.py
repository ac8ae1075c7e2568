"""
Room shell.

Responsibilities:
- Hold rooms, their member preference snapshots and resolution status.
- Store resolution results per room.

This is an in-memory stand-in for the room persistence service.
"""
