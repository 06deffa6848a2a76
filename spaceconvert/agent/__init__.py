"""Command processing loop."""

from spaceconvert.agent.loop import CommandLoop

__all__ = ["CommandLoop"]
