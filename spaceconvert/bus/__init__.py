"""Message bus module for decoupled channel-agent communication."""

from spaceconvert.bus.events import InboundCommand
from spaceconvert.bus.queue import MessageBus

__all__ = ["MessageBus", "InboundCommand"]
