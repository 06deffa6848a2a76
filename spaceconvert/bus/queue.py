"""Async message queue for decoupled channel-agent communication."""

import asyncio

from spaceconvert.bus.events import InboundCommand


class MessageBus:
    """
    Async message bus that decouples chat channels from the command loop.

    Channels push matched commands to the inbound queue; the command loop
    consumes them.
    """

    def __init__(self):
        self.inbound: asyncio.Queue[InboundCommand] = asyncio.Queue()

    async def publish_inbound(self, msg: InboundCommand) -> None:
        """Publish a command from a channel to the loop."""
        await self.inbound.put(msg)

    async def consume_inbound(self) -> InboundCommand:
        """Consume the next inbound command (blocks until available)."""
        return await self.inbound.get()

    @property
    def inbound_size(self) -> int:
        """Number of pending inbound commands."""
        return self.inbound.qsize()
