"""Step outcomes threaded through the conversion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StepKind(Enum):
    """How the pipeline should proceed after a step."""
    CONTINUE = "continue"
    STOP = "stop"      # Guarded rejection or normal terminal outcome
    FAULT = "fault"    # Unexpected failure


@dataclass(frozen=True)
class Notice:
    """A message to send back to the user.

    ``html`` makes it a formatted message; ``notice=False`` sends ``m.text``
    instead of ``m.notice``.
    """
    body: str
    html: str | None = None
    notice: bool = True


@dataclass(frozen=True)
class StepOutcome:
    kind: StepKind
    notice: Notice | None = None
    error: Exception | None = None

    @classmethod
    def proceed(cls) -> "StepOutcome":
        return cls(StepKind.CONTINUE)

    @classmethod
    def stop(cls, notice: Notice) -> "StepOutcome":
        return cls(StepKind.STOP, notice=notice)

    @classmethod
    def fault(cls, error: Exception) -> "StepOutcome":
        return cls(StepKind.FAULT, error=error)

    @property
    def proceeds(self) -> bool:
        return self.kind is StepKind.CONTINUE
