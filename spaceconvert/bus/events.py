"""Event types for the message bus."""

from __future__ import annotations

from dataclasses import dataclass

from spaceconvert.convert.matcher import CommandInvocation


@dataclass
class InboundCommand:
    """A matched command handed from a channel to the command loop."""

    channel: str  # Channel that received it, e.g. "matrix"
    invocation: CommandInvocation

    @property
    def room_id(self) -> str:
        return self.invocation.message.room_id

    @property
    def sender(self) -> str:
        return self.invocation.message.sender
