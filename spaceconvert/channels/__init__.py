"""Chat channels."""

from spaceconvert.channels.base import BaseChannel
from spaceconvert.channels.matrix import MatrixChannel

__all__ = ["BaseChannel", "MatrixChannel"]
