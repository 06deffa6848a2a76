"""Errors raised by Matrix transports."""

from __future__ import annotations


class MatrixRequestError(Exception):
    """A Matrix API call failed.

    Attributes:
        operation: Name of the transport operation that failed
        errcode: Matrix error code (``M_FORBIDDEN``, ...) when the server sent one
        message: Human-readable error from the server
    """

    def __init__(self, operation: str, errcode: str | None = None, message: str = ""):
        self.operation = operation
        self.errcode = errcode
        self.message = message
        detail = f"{errcode}: {message}" if errcode else message
        super().__init__(f"{operation} failed ({detail})" if detail else f"{operation} failed")


class MatrixNotFound(MatrixRequestError):
    """The requested resource does not exist (``M_NOT_FOUND`` / HTTP 404)."""
