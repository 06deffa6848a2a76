"""Recognize command invocations in incoming messages."""

from __future__ import annotations

from dataclasses import dataclass, field

from spaceconvert.convert.identity import BotIdentity

DEFAULT_COMMAND_PREFIX = "!convert"


@dataclass(frozen=True)
class IncomingMessage:
    """The parts of a room message event the matcher looks at."""
    room_id: str
    event_id: str
    sender: str
    body: str
    msgtype: str = "m.text"
    redacted: bool = False


@dataclass(frozen=True)
class CommandInvocation:
    """A message that was addressed to the bot, with its arguments."""
    message: IncomingMessage
    prefix: str
    args: list[str] = field(default_factory=list)

    @property
    def group_id(self) -> str | None:
        """The community id argument, ``None`` when the user asked for help."""
        return self.args[0] if self.args and self.args[0] else None


class CommandMatcher:
    """Classify messages as bot commands and extract their arguments.

    A message is a command when its body starts with the command prefix or
    with the bot's localpart, display name or full id followed by ``:``.
    """

    def __init__(self, identity: BotIdentity, command_prefix: str = DEFAULT_COMMAND_PREFIX):
        self.identity = identity
        self.command_prefix = command_prefix

    @property
    def prefixes(self) -> list[str]:
        prefixes = [self.command_prefix, f"{self.identity.localpart}:"]
        if self.identity.display_name:
            prefixes.append(f"{self.identity.display_name}:")
        prefixes.append(f"{self.identity.user_id}:")
        return prefixes

    def match(self, message: IncomingMessage) -> CommandInvocation | None:
        """Return the invocation, or ``None`` if the message is not for us."""
        if message.redacted:
            return None
        if message.sender == self.identity.user_id:
            return None
        if message.msgtype != "m.text":
            return None

        prefix = next((p for p in self.prefixes if message.body.startswith(p)), None)
        if prefix is None:
            return None

        args = message.body[len(prefix):].strip().split(" ")
        return CommandInvocation(message=message, prefix=prefix, args=args)
