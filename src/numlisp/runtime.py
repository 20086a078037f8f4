from __future__ import annotations

import importlib
import random
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, TextIO, Tuple, Union

from .diagnostics import DiagKind, Diagnostic, DiagnosticSink, Severity, default_sink
from .oper_types import Oper, oper_name
from .scope import Env
from .types import NlValue, NumlispNodeError, NumType, NumValue, make_value, promote
from .utils import rand_seed, strict_symbols_enabled

_STDLIB_INITIALIZED = False


@dataclass
class Context:
    """Per-evaluation state shared by every Env frame of one run."""
    sink: DiagnosticSink = field(default_factory=default_sink)
    stdin: Optional[TextIO] = None
    stdout: Optional[TextIO] = None
    rng: random.Random = field(default_factory=lambda: random.Random(rand_seed()))
    strict: bool = field(default_factory=strict_symbols_enabled)
    # (id(binding), id(env)) pairs currently being evaluated
    active: Set[Tuple[int, int]] = field(default_factory=set)
    # ids of hand-built call nodes whose arity was checked during this run
    checked_calls: Set[int] = field(default_factory=set)

    @property
    def out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    @property
    def inp(self) -> TextIO:
        return self.stdin if self.stdin is not None else sys.stdin

    def warn(self, kind: DiagKind, message: str) -> None:
        self.sink.emit(Diagnostic(kind, message, Severity.WARNING))

    def error(self, kind: DiagKind, message: str) -> None:
        self.sink.emit(Diagnostic(kind, message, Severity.ERROR))


def root_env(ctx: Optional[Context] = None) -> Env:
    return Env(ctx=ctx if ctx is not None else Context())


def init_stdlib() -> None:
    """Load the operator library (idempotent) so register_builtin hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("numlisp.stdlib")
    _STDLIB_INITIALIZED = True


# Strict built-ins receive evaluated values; lazy ones (print) receive the
# argument nodes and the frame so they control evaluation order themselves.
StrictFn = Callable[[Context, List[NumValue]], NlValue]
LazyFn = Callable[[Context, List[object], Env, Callable], NlValue]


@dataclass(frozen=True)
class BuiltinOperator:
    oper: Oper
    fn: Union[StrictFn, LazyFn]
    lazy: bool = False

    @property
    def name(self) -> str:
        return oper_name(self.oper)


class Builtins:
    registry: Dict[Oper, BuiltinOperator] = {}


def register_builtin(oper: Oper, *, lazy: bool = False):
    def dec(fn: Callable[..., NlValue]):
        Builtins.registry[oper] = BuiltinOperator(oper=oper, fn=fn, lazy=lazy)
        return fn

    return dec


def get_builtin(oper: Oper) -> BuiltinOperator:
    init_stdlib()

    handler = Builtins.registry.get(oper)
    if handler is None:
        raise NumlispNodeError(f"No built-in registered for operator code {int(oper)}")

    return handler


def promoted(amount: float, operands: List[NumValue]) -> NumValue:
    """Result typed FLOAT if any operand is FLOAT; INT results are rounded."""
    return make_value(amount, promote(operands))


def as_bool(flag: bool) -> NumValue:
    return make_value(1.0 if flag else 0.0, NumType.INT)


__all__ = [
    "Context",
    "Env",
    "Builtins",
    "BuiltinOperator",
    "register_builtin",
    "get_builtin",
    "init_stdlib",
    "root_env",
    "promoted",
    "as_bool",
]
