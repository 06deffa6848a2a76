"""Base channel interface for chat platforms."""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from spaceconvert.bus.events import InboundCommand
from spaceconvert.bus.queue import MessageBus
from spaceconvert.convert.matcher import CommandMatcher, IncomingMessage


class BaseChannel(ABC):
    """
    Abstract base class for chat channel implementations.

    A channel owns the connection to the chat platform. It turns platform
    events into :class:`IncomingMessage` objects and hands the ones that
    match a bot command to the message bus.
    """

    name: str = "base"

    def __init__(self, config: Any, bus: MessageBus):
        """
        Initialize the channel.

        Args:
            config: Channel-specific configuration.
            bus: The message bus for communication.
        """
        self.config = config
        self.bus = bus
        self.matcher: CommandMatcher | None = None
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """
        Start the channel and begin listening for messages.

        This should be a long-running async task that:
        1. Connects to the chat platform
        2. Listens for incoming messages
        3. Forwards messages to the bus via _handle_message()
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and clean up resources."""
        pass

    async def _handle_message(self, message: IncomingMessage) -> bool:
        """
        Forward a message to the bus if it is a command for this bot.

        Args:
            message: The normalized incoming message.

        Returns:
            True if the message was published as a command.
        """
        if self.matcher is None:
            logger.warning(f"[{self.name}] Message received before the bot identity was resolved")
            return False

        invocation = self.matcher.match(message)
        if invocation is None:
            return False

        logger.debug(
            f"[{self.name}:{message.room_id}] Command from {message.sender} "
            f"via {invocation.prefix!r}: {invocation.args}"
        )
        await self.bus.publish_inbound(InboundCommand(channel=self.name, invocation=invocation))
        return True

    @property
    def is_running(self) -> bool:
        """Check if the channel is running."""
        return self._running
