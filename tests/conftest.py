"""Shared fixtures: an in-memory Matrix transport that records every call."""

import copy
from typing import Any

import pytest

from spaceconvert.convert.identity import BotIdentity
from spaceconvert.convert.matcher import CommandInvocation, CommandMatcher, IncomingMessage
from spaceconvert.matrix.errors import MatrixNotFound, MatrixRequestError

BOT_ID = "@spacebot:bot.server"
ADMIN = "@alice:example.org"
OTHER_ADMIN = "@bob:other.org"
MEMBER = "@carol:example.org"
GROUP = "+example:example.org"
COMMAND_ROOM = "!command:example.org"


class FakeTransport:
    """In-memory stand-in for the Matrix service.

    ``fail_on`` maps an operation name to the exception it should raise.
    ``calls`` lists ``(operation, args)`` in the order they happened.
    """

    def __init__(self, user_id: str = BOT_ID, display_name: str | None = "Space Bot"):
        self._user_id = user_id
        self.display_name = display_name
        self.calls: list[tuple[str, tuple]] = []
        self.fail_on: dict[str, Exception] = {}

        self.aliases: dict[str, str] = {}
        self.joined_groups: list[str] = []
        self.joinable_groups: set[str] = set()
        self.invited_groups: set[str] = set()
        self.groups: dict[str, dict[str, Any]] = {}

        self.spaces: list[dict[str, Any]] = []
        self.state: dict[str, dict[tuple[str, str], dict]] = {}
        self.state_writes: list[tuple[str, str, str, dict]] = []
        self.invites: list[tuple[str, str]] = []
        self.replies: list[dict[str, Any]] = []
        self.reactions: dict[str, tuple[str, str, str]] = {}
        self.redactions: list[tuple[str, str]] = []
        self._counter = 0

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, args))
        error = self.fail_on.get(operation)
        if error is not None:
            raise error

    def _next_id(self, sigil: str) -> str:
        self._counter += 1
        return f"{sigil}{self._counter}:bot.server"

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]

    def add_group(
        self,
        group_id: str,
        profile: dict[str, Any] | None = None,
        users: list[dict[str, Any]] | None = None,
        rooms: list[dict[str, Any]] | None = None,
    ) -> None:
        self.groups[group_id] = {
            "profile": profile or {},
            "users": users or [],
            "rooms": rooms or [],
        }

    @property
    def user_id(self) -> str:
        return self._user_id

    async def get_display_name(self, user_id: str) -> str | None:
        self._record("get_display_name", user_id)
        return self.display_name

    async def send_reply(self, room_id, event_id, body, html=None, notice=True) -> str:
        self._record("send_reply", room_id, event_id)
        self.replies.append(
            {"room_id": room_id, "event_id": event_id, "body": body, "html": html, "notice": notice}
        )
        return self._next_id("$")

    async def react(self, room_id, event_id, key) -> str:
        self._record("react", room_id, event_id, key)
        reaction_id = self._next_id("$")
        self.reactions[reaction_id] = (room_id, event_id, key)
        return reaction_id

    async def redact(self, room_id, event_id) -> None:
        self._record("redact", room_id, event_id)
        self.redactions.append((room_id, event_id))
        self.reactions.pop(event_id, None)

    async def resolve_alias(self, alias) -> str:
        self._record("resolve_alias", alias)
        if alias not in self.aliases:
            raise MatrixNotFound("resolve_alias", "M_NOT_FOUND", "Room alias not found")
        return self.aliases[alias]

    async def create_alias(self, alias, room_id) -> None:
        self._record("create_alias", alias, room_id)
        if alias in self.aliases:
            raise MatrixRequestError("create_alias", "M_UNKNOWN", "Room alias already exists")
        self.aliases[alias] = room_id

    async def get_joined_groups(self) -> list[str]:
        self._record("get_joined_groups")
        return list(self.joined_groups)

    async def join_group(self, group_id) -> None:
        self._record("join_group", group_id)
        if group_id not in self.joinable_groups:
            raise MatrixRequestError("join_group", "M_FORBIDDEN", "Group is not joinable")
        self.joined_groups.append(group_id)

    async def accept_group_invite(self, group_id) -> None:
        self._record("accept_group_invite", group_id)
        if group_id not in self.invited_groups:
            raise MatrixRequestError("accept_group_invite", "M_FORBIDDEN", "No invite")
        self.joined_groups.append(group_id)

    async def get_group_profile(self, group_id) -> dict[str, Any]:
        self._record("get_group_profile", group_id)
        return dict(self.groups[group_id]["profile"])

    async def get_group_users(self, group_id) -> list[dict[str, Any]]:
        self._record("get_group_users", group_id)
        return [dict(u) for u in self.groups[group_id]["users"]]

    async def get_group_rooms(self, group_id) -> list[dict[str, Any]]:
        self._record("get_group_rooms", group_id)
        return [dict(r) for r in self.groups[group_id]["rooms"]]

    async def create_space(self, name, topic, is_public) -> str:
        self._record("create_space", name, topic, is_public)
        space_id = self._next_id("!")
        self.spaces.append({"room_id": space_id, "name": name, "topic": topic, "is_public": is_public})
        self.state[space_id] = {
            ("m.room.power_levels", ""): {"users": {self.user_id: 100}, "users_default": 0},
        }
        return space_id

    async def add_child_room(self, space_id, room_id, via) -> None:
        self._record("add_child_room", space_id, room_id, tuple(via))
        self.state[space_id][("m.space.child", room_id)] = {"via": list(via)}

    async def get_state_event(self, room_id, event_type, state_key="") -> dict[str, Any]:
        self._record("get_state_event", room_id, event_type, state_key)
        try:
            return copy.deepcopy(self.state[room_id][(event_type, state_key)])
        except KeyError:
            raise MatrixNotFound("get_state_event", "M_NOT_FOUND", "Event not found")

    async def send_state_event(self, room_id, event_type, content, state_key="") -> str:
        self._record("send_state_event", room_id, event_type, state_key)
        snapshot = copy.deepcopy(content)
        self.state.setdefault(room_id, {})[(event_type, state_key)] = snapshot
        self.state_writes.append((room_id, event_type, state_key, snapshot))
        return self._next_id("$")

    async def invite_user(self, room_id, user_id) -> None:
        self._record("invite_user", room_id, user_id)
        self.invites.append((room_id, user_id))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def identity():
    return BotIdentity(user_id=BOT_ID, display_name="Space Bot")


@pytest.fixture
def matcher(identity):
    return CommandMatcher(identity)


@pytest.fixture
def converted_group(transport):
    """A community with two rooms, two admins and one ordinary member."""
    transport.add_group(
        GROUP,
        profile={
            "name": "Example Community",
            "short_description": "All things example",
            "avatar_url": "mxc://example.org/avatar",
            "is_openly_joinable": True,
        },
        users=[
            {"user_id": ADMIN, "is_privileged": True},
            {"user_id": OTHER_ADMIN, "is_privileged": True},
            {"user_id": MEMBER, "is_privileged": False},
        ],
        rooms=[
            {"room_id": "!general:example.org", "canonical_alias": "#general:aliases.org"},
            {"room_id": "!random:example.org"},
        ],
    )
    transport.joined_groups.append(GROUP)
    return GROUP


def make_invocation(matcher: CommandMatcher, body: str, sender: str = ADMIN, event_id: str = "$cmd") -> CommandInvocation:
    message = IncomingMessage(room_id=COMMAND_ROOM, event_id=event_id, sender=sender, body=body)
    invocation = matcher.match(message)
    assert invocation is not None
    return invocation
