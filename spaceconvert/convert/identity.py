"""The bot's own identity, resolved once at startup."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from spaceconvert.matrix.transport import MatrixTransport
from spaceconvert.utils.ids import server_of, user_localpart


@dataclass(frozen=True)
class BotIdentity:
    """Immutable snapshot of who the bot is.

    Attributes:
        user_id: Full Matrix id, e.g. ``@spaceconvert:example.org``
        display_name: Profile display name, ``None`` if unset or unavailable
    """
    user_id: str
    display_name: str | None = None

    @property
    def localpart(self) -> str:
        return user_localpart(self.user_id)

    @property
    def server(self) -> str:
        return server_of(self.user_id)

    @classmethod
    async def resolve(cls, transport: MatrixTransport) -> "BotIdentity":
        """Build the identity from a logged-in transport.

        A failed profile lookup is not fatal: the bot still answers to its
        command prefix, localpart and full id.
        """
        user_id = transport.user_id
        display_name = None
        try:
            display_name = await transport.get_display_name(user_id) or None
        except Exception as e:
            logger.warning(f"Could not fetch display name for {user_id}: {e}")

        identity = cls(user_id=user_id, display_name=display_name)
        logger.info(f"Running as {user_id} (display name: {display_name or '-'})")
        return identity
