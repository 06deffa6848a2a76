"""Transport interface the conversion core talks to.

The core never imports a Matrix client library directly; it depends on the
:class:`MatrixTransport` protocol below. :mod:`spaceconvert.matrix.nio_transport`
provides the production implementation, tests provide an in-memory one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Protocol, TypeVar

from loguru import logger

from spaceconvert.matrix.errors import MatrixNotFound

T = TypeVar("T")


class MatrixTransport(Protocol):
    """Everything the bot needs from the messaging service.

    Every coroutine raises :class:`~spaceconvert.matrix.errors.MatrixRequestError`
    (or its :class:`MatrixNotFound` subclass) when the server rejects the call.
    """

    @property
    def user_id(self) -> str: ...

    # Identity/profile
    async def get_display_name(self, user_id: str) -> str | None: ...

    # Messages
    async def send_reply(
        self,
        room_id: str,
        event_id: str,
        body: str,
        html: str | None = None,
        notice: bool = True,
    ) -> str: ...

    async def react(self, room_id: str, event_id: str, key: str) -> str: ...

    async def redact(self, room_id: str, event_id: str) -> None: ...

    # Directory
    async def resolve_alias(self, alias: str) -> str: ...

    async def create_alias(self, alias: str, room_id: str) -> None: ...

    # Legacy communities
    async def get_joined_groups(self) -> list[str]: ...

    async def join_group(self, group_id: str) -> None: ...

    async def accept_group_invite(self, group_id: str) -> None: ...

    async def get_group_profile(self, group_id: str) -> dict[str, Any]: ...

    async def get_group_users(self, group_id: str) -> list[dict[str, Any]]: ...

    async def get_group_rooms(self, group_id: str) -> list[dict[str, Any]]: ...

    # Spaces and room state
    async def create_space(self, name: str, topic: str, is_public: bool) -> str: ...

    async def add_child_room(self, space_id: str, room_id: str, via: list[str]) -> None: ...

    async def get_state_event(
        self, room_id: str, event_type: str, state_key: str = ""
    ) -> dict[str, Any]: ...

    async def send_state_event(
        self,
        room_id: str,
        event_type: str,
        content: dict[str, Any],
        state_key: str = "",
    ) -> str: ...

    async def invite_user(self, room_id: str, user_id: str) -> None: ...


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a best-effort call: either a value or the error it raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def not_found(self) -> bool:
        return isinstance(self.error, MatrixNotFound)


async def best_effort(operation: Awaitable[T], description: str = "") -> Result[T]:
    """Await ``operation`` and capture any failure instead of raising it."""
    try:
        return Result(value=await operation)
    except Exception as e:
        logger.debug(f"Best-effort {description or 'call'} failed: {e}")
        return Result(error=e)
