from __future__ import annotations

from ..scope import Env
from ..tree import CondNode
from ..types import MISSING, NlValue, is_missing
from .common import EvalFunc


def eval_conditional(node: CondNode, env: Env, eval_func: EvalFunc) -> NlValue:
    test = eval_func(node.cond, env)

    if is_missing(test):
        return MISSING

    # only the chosen branch is evaluated
    if test.amount == 0:
        return eval_func(node.if_false, env)

    return eval_func(node.if_true, env)
