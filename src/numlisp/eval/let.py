from __future__ import annotations

from ..diagnostics import DiagKind
from ..scope import Env, FunctionBinding, Thunk, VariableBinding
from ..tree import SymbolNode
from ..types import (
    MISSING,
    CircularDefinitionError,
    NlValue,
    NumlispTypeError,
    UnresolvedSymbolError,
)
from .common import EvalFunc, coerce_declared


def eval_symbol(node: SymbolNode, env: Env, eval_func: EvalFunc) -> NlValue:
    try:
        found, owner = env.lookup(node.ident)
    except UnresolvedSymbolError:
        if env.ctx.strict:
            raise
        env.ctx.error(DiagKind.UNRESOLVED_SYMBOL, f"Undefined symbol '{node.ident}'")
        return MISSING

    match found:
        case Thunk(node=arg, env=arg_env):
            # call-by-name: re-evaluated on every reference
            return eval_func(arg, arg_env)
        case VariableBinding():
            return eval_variable_binding(found, owner, eval_func)
        case FunctionBinding():
            raise NumlispTypeError(f"'{node.ident}' is a function, not a variable")
        case _:
            raise NumlispTypeError(f"Unexpected binding {type(found).__name__} for '{node.ident}'")


def eval_variable_binding(binding: VariableBinding, owner: Env, eval_func: EvalFunc) -> NlValue:
    ctx = owner.ctx
    key = (id(binding), id(owner))

    if key in ctx.active:
        raise CircularDefinitionError(binding.ident)

    ctx.active.add(key)
    try:
        value = eval_func(binding.value, owner)
    finally:
        ctx.active.discard(key)

    return coerce_declared(value, binding.kind, binding.ident, ctx)
