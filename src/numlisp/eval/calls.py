from __future__ import annotations

from typing import List

from ..oper_types import arity_bounds
from ..runtime import get_builtin
from ..scope import Env
from ..tree import CallNode, check_builtin_arity
from ..types import MISSING, NlValue, NumValue, is_missing
from .common import EvalFunc


def eval_builtin_call(node: CallNode, env: Env, eval_func: EvalFunc) -> NlValue:
    handler = get_builtin(node.oper)
    args = node.args

    # call nodes built outside the factories have not been checked yet
    if not node.checked and id(node) not in env.ctx.checked_calls:
        check_builtin_arity(node.oper, len(args), env.ctx.sink)
        env.ctx.checked_calls.add(id(node))

    if handler.lazy:
        return handler.fn(env.ctx, list(args), env, eval_func)

    _, high = arity_bounds(node.oper)
    used = args if high is None else args[:high]
    values: List[NumValue] = []
    saw_missing = False

    # left to right, every used operand is evaluated even after a missing one
    for arg in used:
        value = eval_func(arg, env)
        if is_missing(value):
            saw_missing = True
            continue
        values.append(value)

    if saw_missing:
        return MISSING

    return handler.fn(env.ctx, values)
