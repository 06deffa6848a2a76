"""Transient "work in progress" marker on the triggering message."""

from __future__ import annotations

from loguru import logger

from spaceconvert.matrix.transport import MatrixTransport, best_effort

DEFAULT_PROGRESS_REACTION = "In Progress"


class ProgressMarker:
    """A reaction that shows a command is being worked on.

    Adding and removing the reaction are both best-effort: a failure leaves
    the conversion untouched. Use it as an async context manager so the
    marker is removed on every exit path:

        async with ProgressMarker(transport, room_id, event_id) as marker:
            ...
            await marker.clear()  # optional early clear, exit won't repeat it
    """

    def __init__(
        self,
        transport: MatrixTransport,
        room_id: str,
        event_id: str,
        reaction: str = DEFAULT_PROGRESS_REACTION,
    ):
        self.transport = transport
        self.room_id = room_id
        self.event_id = event_id
        self.reaction = reaction
        self.marker_id: str | None = None
        self._started = False
        self._cleared = False

    async def start(self) -> str | None:
        """Place the marker. Returns its event id, or ``None`` if that failed."""
        if self._started:
            return self.marker_id
        self._started = True
        result = await best_effort(
            self.transport.react(self.room_id, self.event_id, self.reaction),
            "progress reaction",
        )
        self.marker_id = result.value if result.ok else None
        return self.marker_id

    async def clear(self) -> None:
        """Remove the marker if one was placed. Safe to call more than once."""
        if self._cleared or self.marker_id is None:
            return
        self._cleared = True
        result = await best_effort(
            self.transport.redact(self.room_id, self.marker_id),
            "progress reaction removal",
        )
        if result.ok:
            logger.debug(f"Cleared progress marker {self.marker_id} in {self.room_id}")

    async def __aenter__(self) -> "ProgressMarker":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.clear()
        return False
