"""
Operator codes for numlisp calls.

The arity class of a built-in follows from where it sits in the enum:
nonary < unary < binary < variadic. Keep new operators inside their band.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Optional, Tuple


class Oper(IntEnum):
    # nonary
    READ = 0
    RAND = 1

    # unary
    NEG = 2
    ABS = 3
    EXP = 4
    SQRT = 5
    LOG = 6
    EXP2 = 7
    CBRT = 8

    # binary
    REMAINDER = 9
    POW = 10
    MAX = 11
    MIN = 12
    HYPOT = 13
    EQUAL = 14
    LESS = 15
    GREATER = 16

    # variadic
    ADD = 17
    SUB = 18
    MULT = 19
    DIV = 20
    PRINT = 21

    CUSTOM = 255


FIRST_UNARY = Oper.NEG
FIRST_BINARY = Oper.REMAINDER
FIRST_VARIADIC = Oper.ADD


class ArityClass(Enum):
    NONARY = "nonary"
    UNARY = "unary"
    BINARY = "binary"
    VARIADIC = "variadic"


# min, max (None = unbounded)
_BOUNDS: Dict[ArityClass, Tuple[int, Optional[int]]] = {
    ArityClass.NONARY: (0, 0),
    ArityClass.UNARY: (1, 1),
    ArityClass.BINARY: (2, 2),
    ArityClass.VARIADIC: (0, None),
}

BUILTIN_NAMES: Dict[str, Oper] = {
    op.name.lower(): op for op in Oper if op is not Oper.CUSTOM
}


def resolve_oper(name: str) -> Oper:
    return BUILTIN_NAMES.get(name, Oper.CUSTOM)


def oper_name(oper: Oper) -> str:
    return oper.name.lower()


def arity_class(oper: Oper) -> ArityClass:
    if oper is Oper.CUSTOM:
        raise ValueError("custom calls have no fixed arity class")

    if oper < FIRST_UNARY:
        return ArityClass.NONARY

    if oper < FIRST_BINARY:
        return ArityClass.UNARY

    if oper < FIRST_VARIADIC:
        return ArityClass.BINARY

    return ArityClass.VARIADIC


def arity_bounds(oper: Oper) -> Tuple[int, Optional[int]]:
    return _BOUNDS[arity_class(oper)]
