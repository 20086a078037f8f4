from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from .diagnostics import CollectingSink, Diagnostic, DiagnosticSink, default_sink
from .oper_types import Oper
from .runtime import Context, init_stdlib, root_env
from .scope import Env
from .tree import CallNode, CondNode, Node, NumberNode, SymbolNode, is_node
from .types import (
    MISSING,
    NlValue,
    NumlispError,
    NumlispNodeError,
    NumlispRecursionError,
)
from .utils import strict_symbols_enabled

from .eval.calls import eval_builtin_call
from .eval.control import eval_conditional
from .eval.fn import invoke_custom
from .eval.let import eval_symbol

# ---------------- Public API ----------------

def make_context(
    sink: Optional[DiagnosticSink] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
    strict: Optional[bool] = None,
) -> Context:
    ctx = Context(sink=sink if sink is not None else default_sink(), stdin=stdin, stdout=stdout)

    if rng is not None:
        ctx.rng = rng

    ctx.strict = strict_symbols_enabled() if strict is None else strict
    return ctx


def evaluate(
    root: Optional[Node],
    *,
    sink: Optional[DiagnosticSink] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
    strict: Optional[bool] = None,
    env: Optional[Env] = None,
) -> NlValue:
    """Evaluate a whole tree. Fatal conditions raise NumlispError."""
    init_stdlib()

    if env is None:
        env = root_env(make_context(sink, stdin, stdout, rng, strict))

    try:
        return eval_node(root, env)
    except RecursionError as exc:
        raise NumlispRecursionError("maximum recursion depth exceeded during evaluation") from exc


@dataclass
class EvalResult:
    value: NlValue = MISSING
    error: Optional[NumlispError] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def evaluate_result(
    root: Optional[Node],
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
    strict: Optional[bool] = None,
) -> EvalResult:
    """Like evaluate(), but fatal errors and warnings come back as data."""
    sink = CollectingSink()

    try:
        value = evaluate(root, sink=sink, stdin=stdin, stdout=stdout, rng=rng, strict=strict)
    except NumlispError as exc:
        return EvalResult(MISSING, exc, list(sink.items))

    return EvalResult(value, None, list(sink.items))

# ---------------- Core evaluator ----------------

def eval_node(n: Optional[Node], env: Env) -> NlValue:
    if n is None:
        return MISSING

    if not is_node(n):
        raise NumlispNodeError(f"Invalid AST node kind {type(n).__name__}")

    env = env.extend(n)

    match n:
        case NumberNode(value=value):
            return value
        case SymbolNode():
            return eval_symbol(n, env, eval_node)
        case CallNode(oper=Oper.CUSTOM):
            return invoke_custom(n, None, env, eval_node)
        case CallNode():
            return eval_builtin_call(n, env, eval_node)
        case CondNode():
            return eval_conditional(n, env, eval_node)
        case _:
            raise NumlispNodeError(f"Invalid AST node kind {type(n).__name__}")
