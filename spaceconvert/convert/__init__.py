"""Community-to-space conversion core."""

from spaceconvert.convert.identity import BotIdentity
from spaceconvert.convert.matcher import CommandInvocation, CommandMatcher, IncomingMessage
from spaceconvert.convert.orchestrator import ConversionOrchestrator
from spaceconvert.convert.outcome import Notice, StepKind, StepOutcome
from spaceconvert.convert.progress import ProgressMarker

__all__ = [
    "BotIdentity",
    "CommandInvocation",
    "CommandMatcher",
    "ConversionOrchestrator",
    "IncomingMessage",
    "Notice",
    "ProgressMarker",
    "StepKind",
    "StepOutcome",
]
