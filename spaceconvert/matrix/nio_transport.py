"""matrix-nio backed implementation of :class:`MatrixTransport`.

Typed nio calls are used wherever nio offers them. The legacy community
("groups") API was never part of nio, so those endpoints are issued as raw
requests through ``AsyncClient.send``.
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import nio
from loguru import logger

from spaceconvert.matrix.errors import MatrixNotFound, MatrixRequestError

GROUPS_API_PREFIX = "/_matrix/client/r0"


def _raise_for(operation: str, errcode: str | None, message: str | None, status: int | None = None):
    if errcode == "M_NOT_FOUND" or status == 404:
        raise MatrixNotFound(operation, errcode, message or "")
    raise MatrixRequestError(operation, errcode, message or "")


def _check(response: Any, operation: str) -> Any:
    """Turn a nio error response into an exception, pass anything else through."""
    if isinstance(response, nio.ErrorResponse):
        _raise_for(operation, response.status_code, response.message)
    return response


class NioTransport:
    """Adapter from a logged-in :class:`nio.AsyncClient` to the bot's transport."""

    def __init__(self, client: nio.AsyncClient):
        self.client = client

    @property
    def user_id(self) -> str:
        return self.client.user_id

    # ── Identity ──────────────────────────────────────────────────────────

    async def get_display_name(self, user_id: str) -> str | None:
        response = _check(await self.client.get_displayname(user_id), "get_display_name")
        return response.displayname

    # ── Messages ──────────────────────────────────────────────────────────

    async def send_reply(
        self,
        room_id: str,
        event_id: str,
        body: str,
        html: str | None = None,
        notice: bool = True,
    ) -> str:
        content: dict[str, Any] = {
            "msgtype": "m.notice" if notice else "m.text",
            "body": body,
            "m.relates_to": {"m.in_reply_to": {"event_id": event_id}},
        }
        if html is not None:
            content["format"] = "org.matrix.custom.html"
            content["formatted_body"] = html
        response = _check(
            await self.client.room_send(room_id, "m.room.message", content),
            "send_reply",
        )
        return response.event_id

    async def react(self, room_id: str, event_id: str, key: str) -> str:
        content = {
            "m.relates_to": {
                "rel_type": "m.annotation",
                "event_id": event_id,
                "key": key,
            }
        }
        response = _check(
            await self.client.room_send(room_id, "m.reaction", content),
            "react",
        )
        return response.event_id

    async def redact(self, room_id: str, event_id: str) -> None:
        _check(await self.client.room_redact(room_id, event_id), "redact")

    # ── Directory ─────────────────────────────────────────────────────────

    async def resolve_alias(self, alias: str) -> str:
        response = _check(await self.client.room_resolve_alias(alias), "resolve_alias")
        return response.room_id

    async def create_alias(self, alias: str, room_id: str) -> None:
        _check(await self.client.room_put_alias(alias, room_id), "create_alias")

    # ── Legacy communities ────────────────────────────────────────────────

    async def _groups_request(
        self,
        method: str,
        path: str,
        operation: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.client.access_token}"}
        body = None
        if data is not None:
            body = json.dumps(data)
            headers["Content-Type"] = "application/json"

        response = await self.client.send(method, f"{GROUPS_API_PREFIX}{path}", body, headers)
        try:
            payload = await response.json(content_type=None)
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.status >= 400:
            _raise_for(operation, payload.get("errcode"), payload.get("error"), response.status)
        return payload

    @staticmethod
    def _group_path(group_id: str, suffix: str) -> str:
        return f"/groups/{quote(group_id, safe='')}/{suffix}"

    async def get_joined_groups(self) -> list[str]:
        payload = await self._groups_request("GET", "/joined_groups", "get_joined_groups")
        return list(payload.get("groups", []))

    async def join_group(self, group_id: str) -> None:
        await self._groups_request(
            "PUT", self._group_path(group_id, "self/join"), "join_group", data={}
        )

    async def accept_group_invite(self, group_id: str) -> None:
        await self._groups_request(
            "PUT", self._group_path(group_id, "self/accept_invite"), "accept_group_invite", data={}
        )

    async def get_group_profile(self, group_id: str) -> dict[str, Any]:
        return await self._groups_request(
            "GET", self._group_path(group_id, "profile"), "get_group_profile"
        )

    async def get_group_users(self, group_id: str) -> list[dict[str, Any]]:
        payload = await self._groups_request(
            "GET", self._group_path(group_id, "users"), "get_group_users"
        )
        return list(payload.get("chunk", []))

    async def get_group_rooms(self, group_id: str) -> list[dict[str, Any]]:
        payload = await self._groups_request(
            "GET", self._group_path(group_id, "rooms"), "get_group_rooms"
        )
        return list(payload.get("chunk", []))

    # ── Spaces and room state ─────────────────────────────────────────────

    async def create_space(self, name: str, topic: str, is_public: bool) -> str:
        response = _check(
            await self.client.room_create(
                visibility=nio.RoomVisibility.public if is_public else nio.RoomVisibility.private,
                name=name,
                topic=topic,
                preset=nio.RoomPreset.public_chat if is_public else nio.RoomPreset.private_chat,
                space=True,
            ),
            "create_space",
        )
        logger.debug(f"Created space {response.room_id} ({'public' if is_public else 'private'})")
        return response.room_id

    async def add_child_room(self, space_id: str, room_id: str, via: list[str]) -> None:
        await self.send_state_event(space_id, "m.space.child", {"via": via}, state_key=room_id)

    async def get_state_event(
        self, room_id: str, event_type: str, state_key: str = ""
    ) -> dict[str, Any]:
        response = _check(
            await self.client.room_get_state_event(room_id, event_type, state_key),
            "get_state_event",
        )
        return dict(response.content)

    async def send_state_event(
        self,
        room_id: str,
        event_type: str,
        content: dict[str, Any],
        state_key: str = "",
    ) -> str:
        response = _check(
            await self.client.room_put_state(room_id, event_type, content, state_key=state_key),
            "send_state_event",
        )
        return response.event_id

    async def invite_user(self, room_id: str, user_id: str) -> None:
        _check(await self.client.room_invite(room_id, user_id), "invite_user")
