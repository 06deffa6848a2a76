"""Utility functions for spaceconvert."""

from spaceconvert.utils.ids import (
    MatrixId,
    routing_server,
    server_of,
    space_alias_for,
    user_localpart,
)

__all__ = [
    "MatrixId",
    "routing_server",
    "server_of",
    "space_alias_for",
    "user_localpart",
]
