"""Warning channel kept apart from program output.

Fatal conditions are raised as NumlispError subclasses; everything in this
module is non-fatal and only reported.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, TextIO
from typing_extensions import Protocol

from .utils import quiet_enabled


class DiagKind(Enum):
    UNRESOLVED_SYMBOL = auto()
    ARITY_TOO_MANY = auto()
    CONFLICTING_DEFINITION = auto()
    PRECISION_LOSS = auto()
    INVALID_INPUT_FORMAT = auto()
    INVALID_TYPE = auto()


class Severity(Enum):
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagKind
    message: str
    severity: Severity = Severity.WARNING

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message}"


class DiagnosticSink(Protocol):
    def emit(self, diag: Diagnostic) -> None: ...


class StreamSink:
    """Writes diagnostics to a text stream (stderr unless told otherwise)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def emit(self, diag: Diagnostic) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        print(str(diag), file=stream)


class CollectingSink:
    def __init__(self) -> None:
        self.items: List[Diagnostic] = []

    def emit(self, diag: Diagnostic) -> None:
        self.items.append(diag)

    def kinds(self) -> List[DiagKind]:
        return [d.kind for d in self.items]

    def count(self, kind: DiagKind) -> int:
        return sum(1 for d in self.items if d.kind is kind)

    def clear(self) -> None:
        self.items.clear()


class NullSink:
    def emit(self, diag: Diagnostic) -> None:
        del diag


def default_sink() -> DiagnosticSink:
    if quiet_enabled():
        return NullSink()

    return StreamSink()


def report(sink: Optional[DiagnosticSink], kind: DiagKind, message: str,
           severity: Severity = Severity.WARNING) -> Diagnostic:
    diag = Diagnostic(kind, message, severity)
    (sink if sink is not None else default_sink()).emit(diag)
    return diag
