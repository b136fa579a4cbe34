"""
Structured diagnostics for the ingestion pipeline.

Every stage reports what it recovered from (dropped rows, repaired
quaternions, synthetic fallback data) as a ``DiagnosticEvent`` sent to a
caller-supplied sink. The default sink forwards events to the standard
``logging`` module; ``CollectingDiagnostics`` keeps them for inspection.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class DiagnosticKind(Enum):
    """Kinds of events emitted by the pipeline."""
    FORMAT_DETECTED = 'format_detected'
    HEADER_SKIPPED = 'header_skipped'
    ROW_DROPPED = 'row_dropped'
    COORDINATE_CLAMPED = 'coordinate_clamped'
    QUATERNION_REPAIRED = 'quaternion_repaired'
    MISSING_JOINT = 'missing_joint'
    FALLBACK_TRIGGERED = 'fallback_triggered'


_LOG_LEVELS = {
    DiagnosticKind.FORMAT_DETECTED: logging.INFO,
    DiagnosticKind.HEADER_SKIPPED: logging.INFO,
    DiagnosticKind.ROW_DROPPED: logging.WARNING,
    DiagnosticKind.COORDINATE_CLAMPED: logging.DEBUG,
    DiagnosticKind.QUATERNION_REPAIRED: logging.DEBUG,
    DiagnosticKind.MISSING_JOINT: logging.WARNING,
    DiagnosticKind.FALLBACK_TRIGGERED: logging.WARNING,
}


@dataclass(frozen=True)
class DiagnosticEvent:
    """One recoverable condition observed while ingesting a file-set."""
    kind: DiagnosticKind
    source: str
    message: str
    frame: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def level(self) -> int:
        return _LOG_LEVELS[self.kind]


class LoggingDiagnostics:
    """
    Forward diagnostic events to ``logging``.

    Events from stage ``source`` go to logger ``PitchMechanics.<source>``.
    Handlers are left to the application.
    """

    def __init__(self, root: str = "PitchMechanics"):
        self.root = root

    def emit(self, event: DiagnosticEvent) -> None:
        logger = logging.getLogger(f"{self.root}.{event.source}")
        if event.frame is not None:
            logger.log(event.level, "[frame %d] %s", event.frame, event.message)
        else:
            logger.log(event.level, "%s", event.message)


class CollectingDiagnostics:
    """Keep every emitted event in memory."""

    def __init__(self):
        self.events: List[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: DiagnosticKind) -> List[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]

    def count(self, kind: DiagnosticKind) -> int:
        return len(self.of_kind(kind))

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)


class MultiDiagnostics:
    """Send each event to several sinks."""

    def __init__(self, *sinks):
        self.sinks = list(sinks)

    def emit(self, event: DiagnosticEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)


def resolve_diagnostics(sink=None):
    """Return ``sink`` or the default logging sink when none is given."""
    return sink if sink is not None else LoggingDiagnostics()
