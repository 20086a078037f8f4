"""Built-in operators registered via numlisp.runtime."""

from __future__ import annotations

import math
import re
from typing import Callable, List

from .diagnostics import DiagKind
from .oper_types import Oper
from .runtime import Context, Env, as_bool, promoted, register_builtin
from .types import MISSING, NlValue, NumType, NumValue, NumlispInputError, make_value
from .eval.common import format_value

READ_PROMPT = "read := "
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)$")

# ---------- IEEE-style helpers (C math semantics instead of exceptions) ----------

def _div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)

    return a / b

def _log(x: float) -> float:
    if x == 0.0:
        return -math.inf
    if x < 0.0 or math.isnan(x):
        return math.nan

    return math.log(x)

def _sqrt(x: float) -> float:
    if x < 0.0 or math.isnan(x):
        return math.nan

    return math.sqrt(x)

def _overflowing(fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapped(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.inf

    return wrapped

def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # 0 to a negative power is a pole, negative base with fractional exponent is a domain error
        if a == 0.0:
            return math.inf
        return math.nan

def _remainder(a: float, b: float) -> float:
    try:
        return math.remainder(a, b)
    except ValueError:
        return math.nan

def _fmax(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return max(a, b)

def _fmin(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return min(a, b)

# ---------- nonary ----------

def parse_decimal(text: str) -> float:
    candidate = text.strip()

    if not _DECIMAL_RE.match(candidate):
        raise ValueError(f"not a decimal number: {candidate!r}")

    return float(candidate)

@register_builtin(Oper.READ)
def std_read(ctx: Context, args: List[NumValue]) -> NlValue:
    del args

    while True:
        out = ctx.out
        out.write(READ_PROMPT)
        out.flush()

        line = ctx.inp.readline()
        if not line:
            raise NumlispInputError("read: end of input")

        try:
            amount = parse_decimal(line)
        except ValueError:
            ctx.warn(DiagKind.INVALID_INPUT_FORMAT, f"read: invalid number {line.strip()!r}, try again")
            continue

        return make_value(amount, NumType.FLOAT)

@register_builtin(Oper.RAND)
def std_rand(ctx: Context, args: List[NumValue]) -> NlValue:
    del args
    return make_value(ctx.rng.random(), NumType.FLOAT)

# ---------- unary: result keeps the operand's type ----------

_UNARY: dict[Oper, Callable[[float], float]] = {
    Oper.NEG: lambda x: -x,
    Oper.ABS: math.fabs,
    Oper.EXP: _overflowing(math.exp),
    Oper.SQRT: _sqrt,
    Oper.LOG: _log,
    Oper.EXP2: _overflowing(math.exp2),
    Oper.CBRT: math.cbrt,
}

def _register_unary(oper: Oper, fn: Callable[[float], float]) -> None:
    @register_builtin(oper)
    def _unary(ctx: Context, args: List[NumValue]) -> NlValue:
        del ctx
        x = args[0]
        return make_value(fn(x.amount), x.kind)

for _oper, _fn in _UNARY.items():
    _register_unary(_oper, _fn)

# ---------- binary ----------

_BINARY: dict[Oper, Callable[[float, float], float]] = {
    Oper.REMAINDER: _remainder,
    Oper.POW: _pow,
    Oper.MAX: _fmax,
    Oper.MIN: _fmin,
    Oper.HYPOT: math.hypot,
}

def _register_binary(oper: Oper, fn: Callable[[float, float], float]) -> None:
    @register_builtin(oper)
    def _binary(ctx: Context, args: List[NumValue]) -> NlValue:
        del ctx
        a, b = args[0], args[1]
        return promoted(fn(a.amount, b.amount), [a, b])

for _oper, _fn2 in _BINARY.items():
    _register_binary(_oper, _fn2)

@register_builtin(Oper.EQUAL)
def std_equal(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    return as_bool(args[0].amount == args[1].amount)

@register_builtin(Oper.LESS)
def std_less(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    return as_bool(args[0].amount < args[1].amount)

@register_builtin(Oper.GREATER)
def std_greater(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    return as_bool(args[0].amount > args[1].amount)

# ---------- variadic (left folds) ----------

@register_builtin(Oper.ADD)
def std_add(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    total = 0.0

    for v in args:
        total += v.amount

    return promoted(total, args)

@register_builtin(Oper.SUB)
def std_sub(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    if not args:
        return make_value(0.0, NumType.INT)

    head, *rest = args
    total = head.amount

    for v in rest:
        total -= v.amount

    return promoted(total, args)

@register_builtin(Oper.MULT)
def std_mult(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    product = 1.0

    for v in args:
        product *= v.amount

    return promoted(product, args)

@register_builtin(Oper.DIV)
def std_div(ctx: Context, args: List[NumValue]) -> NlValue:
    del ctx
    if not args:
        return make_value(0.0, NumType.INT)

    head, *rest = args
    quotient = head.amount

    for v in rest:
        quotient = _div(quotient, v.amount)

    return promoted(quotient, args)

@register_builtin(Oper.PRINT, lazy=True)
def std_print(ctx: Context, arg_nodes: List[object], env: Env, eval_fn) -> NlValue:
    last: NlValue = MISSING

    for node in arg_nodes:
        last = eval_fn(node, env)
        print(format_value(last), file=ctx.out)

    return last
