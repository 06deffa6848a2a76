"""Matrix channel built on matrix-nio."""

from __future__ import annotations

import nio
from loguru import logger

from spaceconvert.bus.queue import MessageBus
from spaceconvert.channels.base import BaseChannel
from spaceconvert.config.schema import BotConfig, MatrixConfig
from spaceconvert.convert.identity import BotIdentity
from spaceconvert.convert.matcher import CommandMatcher, IncomingMessage
from spaceconvert.matrix.errors import MatrixRequestError
from spaceconvert.matrix.nio_transport import NioTransport


def to_incoming(room_id: str, event: nio.RoomMessage) -> IncomingMessage:
    """Extract what the command matcher needs from a nio message event."""
    source = event.source or {}
    content = source.get("content", {})
    unsigned = source.get("unsigned", {})
    return IncomingMessage(
        room_id=room_id,
        event_id=event.event_id,
        sender=event.sender,
        body=content.get("body", "") or "",
        msgtype=content.get("msgtype", ""),
        redacted="redacted_because" in unsigned,
    )


class MatrixChannel(BaseChannel):
    """
    Matrix channel using a long-polling sync loop.

    Messages already in the timeline when the bot starts are skipped: event
    callbacks are registered only after the first sync.
    """

    name = "matrix"

    def __init__(self, config: MatrixConfig, bus: MessageBus, bot_config: BotConfig | None = None):
        super().__init__(config, bus)
        self.bot_config = bot_config or BotConfig()
        self.client: nio.AsyncClient | None = None
        self.transport: NioTransport | None = None
        self.identity: BotIdentity | None = None

    async def connect(self) -> BotIdentity:
        """Log in, run the initial sync and resolve the bot's identity."""
        cfg: MatrixConfig = self.config
        client = nio.AsyncClient(cfg.homeserver, cfg.user_id, device_id=cfg.device_id or None)

        if cfg.access_token:
            client.access_token = cfg.access_token
            if not cfg.user_id:
                whoami = await client.whoami()
                if isinstance(whoami, nio.ErrorResponse):
                    await client.close()
                    raise MatrixRequestError("whoami", whoami.status_code, whoami.message)
                client.user_id = whoami.user_id
                client.device_id = whoami.device_id or client.device_id
        elif cfg.password:
            response = await client.login(cfg.password, device_name=cfg.device_name)
            if isinstance(response, nio.LoginError):
                await client.close()
                raise MatrixRequestError("login", response.status_code, response.message)
            logger.info(f"Logged in as {response.user_id} on device {response.device_id}")
        else:
            await client.close()
            raise ValueError("Matrix config needs either an access token or a password")

        response = await client.sync(timeout=0, full_state=True)
        if isinstance(response, nio.SyncError):
            await client.close()
            raise MatrixRequestError("sync", response.status_code, response.message)

        self.client = client
        self.transport = NioTransport(client)
        self.identity = await BotIdentity.resolve(self.transport)
        self.matcher = CommandMatcher(self.identity, self.bot_config.command_prefix)

        client.add_event_callback(self._on_message, nio.RoomMessageText)
        if cfg.auto_join:
            client.add_event_callback(self._on_invite, nio.InviteMemberEvent)
        return self.identity

    async def start(self) -> None:
        """Sync forever, dispatching commands to the bus."""
        if self.client is None:
            await self.connect()

        self._running = True
        logger.info(f"Matrix channel listening as {self.identity.user_id}")
        try:
            await self.client.sync_forever(timeout=self.config.sync_timeout_ms)
        finally:
            self._running = False

    async def stop(self) -> None:
        self._running = False
        if self.client is not None:
            self.client.stop_sync_forever()
            await self.client.close()
            logger.info("Matrix channel stopped")

    async def _on_message(self, room: nio.MatrixRoom, event: nio.RoomMessageText) -> None:
        try:
            await self._handle_message(to_incoming(room.room_id, event))
        except Exception as e:
            logger.error(f"[{self.name}:{room.room_id}] Message handling error: {e}")

    async def _on_invite(self, room: nio.MatrixRoom, event: nio.InviteMemberEvent) -> None:
        if event.state_key != self.client.user_id or event.membership != "invite":
            return
        response = await self.client.join(room.room_id)
        if isinstance(response, nio.JoinError):
            logger.warning(f"Could not accept invite to {room.room_id}: {response.message}")
        else:
            logger.info(f"Joined {room.room_id} after invite from {event.sender}")
