"""Helpers for parsing Matrix identifiers and deriving space aliases."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_ALIAS_PREFIX = "spaceconvert_"


@dataclass(frozen=True)
class MatrixId:
    """A sigil-prefixed Matrix identifier split into localpart and domain.

    Works for user ids (``@bot:example.org``), room aliases
    (``#room:example.org``) and group ids (``+group:example.org``).
    The domain may itself contain a port (``example.org:8448``), so only
    the first colon separates localpart from domain.
    """

    sigil: str
    localpart: str
    domain: str

    @classmethod
    def parse(cls, value: str) -> "MatrixId":
        text = (value or "").strip()
        if len(text) < 2 or ":" not in text:
            raise ValueError(f"Not a valid Matrix identifier: {value!r}")
        sigil, rest = text[0], text[1:]
        localpart, _, domain = rest.partition(":")
        if not localpart or not domain:
            raise ValueError(f"Not a valid Matrix identifier: {value!r}")
        return cls(sigil=sigil, localpart=localpart, domain=domain)

    def __str__(self) -> str:
        return f"{self.sigil}{self.localpart}:{self.domain}"


def user_localpart(user_id: str) -> str:
    """Return the localpart of a user id (``@bot:example.org`` -> ``bot``)."""
    return MatrixId.parse(user_id).localpart


def server_of(identifier: str) -> str:
    """Return the server name of any user id, room alias or group id."""
    return MatrixId.parse(identifier).domain


def space_alias_for(
    group_id: str,
    server: str,
    prefix: str = DEFAULT_ALIAS_PREFIX,
) -> str:
    """Derive the deterministic space alias for a community.

    Every ``:`` in the group id is replaced by ``_`` so the alias localpart
    never contains a colon:

        >>> space_alias_for("+example:example.org", "bot.server")
        '#spaceconvert_+example_example.org:bot.server'
    """
    return f"#{prefix}{group_id.replace(':', '_')}:{server}"


def routing_server(canonical_alias: str | None, fallback_user_id: str) -> str:
    """Pick the server used as the ``via`` hint for a child room.

    Uses the domain of the room's canonical alias when present, otherwise
    the domain of the fallback user (the person who asked for the conversion).
    """
    if canonical_alias:
        try:
            return server_of(canonical_alias)
        except ValueError:
            pass
    return server_of(fallback_user_id)
