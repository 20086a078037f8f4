from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ..diagnostics import DiagKind
from ..scope import Env, FunctionBinding, Thunk, VariableBinding
from ..tree import CallNode, Node
from ..types import (
    MISSING,
    NlValue,
    NumlispArityError,
    NumlispTypeError,
    UnresolvedSymbolError,
)
from .common import EvalFunc, coerce_declared


def resolve_function(node: CallNode, env: Env) -> tuple[FunctionBinding, Env]:
    ident = node.ident
    if ident is None:
        raise NumlispTypeError("Custom call without a function name")

    found, owner = env.lookup(ident)

    if isinstance(found, FunctionBinding):
        return found, owner

    if isinstance(found, (VariableBinding, Thunk)):
        raise NumlispTypeError(f"'{ident}' is a variable, not a function")

    raise NumlispTypeError(f"Unexpected binding {type(found).__name__} for '{ident}'")


def bind_arguments(fn: FunctionBinding, args: Sequence[Node], caller: Env) -> Dict[str, Thunk]:
    """Pair parameters with unevaluated argument nodes (call-by-name)."""
    params = fn.params

    if len(args) < len(params):
        raise NumlispArityError(f"Function '{fn.ident}' expects {len(params)} args; got {len(args)}")

    if len(args) > len(params):
        caller.ctx.warn(DiagKind.ARITY_TOO_MANY,
                        f"Function '{fn.ident}' expects {len(params)} args; got {len(args)}, extras ignored")

    return {name: Thunk(arg, caller) for name, arg in zip(params, args)}


def invoke_custom(node: CallNode, args: Optional[List[Node]], env: Env, eval_func: EvalFunc) -> NlValue:
    """
    Call a user-defined function:
    - callee is looked up from the call site outward;
    - each call gets its own activation frame whose parent is the frame that
      holds the definition, so nothing in the AST is rebound and recursion is safe;
    - arguments stay unevaluated until a parameter is referenced.
    """
    call_args = node.args if args is None else args

    try:
        fn, def_env = resolve_function(node, env)
    except UnresolvedSymbolError:
        if env.ctx.strict:
            raise
        env.ctx.error(DiagKind.UNRESOLVED_SYMBOL, f"Undefined function '{node.ident}'")
        return MISSING

    activation = Env(parent=def_env, params=bind_arguments(fn, call_args, env), label=fn.ident)
    result = eval_func(fn.body, activation)

    return coerce_declared(result, fn.kind, fn.ident, env.ctx)
