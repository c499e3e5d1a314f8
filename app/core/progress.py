"""Progress reporting for pipeline stages.

Stages never write to stdout directly. They emit ``StepEvent`` objects through a
``ProgressReporter`` that the caller injects; the CLI and the worker log them,
tests record them.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)


class StepKind(str, Enum):
    THINKING = "thinking"
    ANALYZING = "analyzing"
    CREATING = "creating"
    EDITING = "editing"
    MIGRATING = "migrating"
    GENERATING = "generating"
    INTEGRATING = "integrating"
    SEEDING = "seeding"
    VALIDATING = "validating"
    EXECUTING = "executing"
    WARNING = "warning"


@dataclass(frozen=True)
class StepEvent:
    kind: StepKind
    message: str
    stage: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind.value, "message": self.message, "stage": self.stage}
        if self.details:
            data["details"] = self.details
        return data


class ProgressReporter:
    """Receives step events from the pipeline."""

    def emit(self, event: StepEvent) -> None:
        raise NotImplementedError

    def step(self, kind: StepKind, message: str, stage: Optional[str] = None, **details: Any) -> None:
        self.emit(StepEvent(kind=kind, message=message, stage=stage, details=details))


class LoggingReporter(ProgressReporter):
    """Writes events to the ``app.progress`` logger with run context attached."""

    def __init__(self, run_id: str = "-"):
        self.run_id = run_id

    def emit(self, event: StepEvent) -> None:
        level = logging.WARNING if event.kind == StepKind.WARNING else logging.INFO
        log.log(
            level,
            "[%s] %s",
            event.kind.value,
            event.message,
            extra={"run_id": self.run_id, "stage": event.stage or "-"},
        )
        if event.details:
            log.debug(
                "details: %s",
                event.details,
                extra={"run_id": self.run_id, "stage": event.stage or "-"},
            )


class RecordingReporter(ProgressReporter):
    """Keeps every event in memory and optionally forwards to another reporter."""

    def __init__(self, forward_to: Optional[ProgressReporter] = None):
        self.events: List[StepEvent] = []
        self.forward_to = forward_to

    def emit(self, event: StepEvent) -> None:
        self.events.append(event)
        if self.forward_to is not None:
            self.forward_to.emit(event)

    def kinds(self) -> List[StepKind]:
        return [e.kind for e in self.events]

    def messages(self, kind: Optional[StepKind] = None) -> List[str]:
        return [e.message for e in self.events if kind is None or e.kind == kind]
