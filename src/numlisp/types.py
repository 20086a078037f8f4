from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union
from typing_extensions import TypeAlias, TypeGuard

# ---------- Value Model ----------

class NumType(Enum):
    INT = "int"
    FLOAT = "float"

    @property
    def tag(self) -> str:
        return "INT_TYPE" if self is NumType.INT else "DOUBLE_TYPE"

_TYPE_NAMES = {
    "int": NumType.INT,
    "integer": NumType.INT,
    "double": NumType.FLOAT,
    "float": NumType.FLOAT,
}

def resolve_type(name: str) -> NumType:
    kind = _TYPE_NAMES.get(name.lower())
    if kind is None:
        raise NumlispTypeError(f"Unknown type name '{name}'")

    return kind

def round_half_away(amount: float) -> float:
    """Round like C's round(): halves go away from zero."""
    if not math.isfinite(amount):
        return amount

    magnitude = abs(amount)
    whole = math.floor(magnitude)
    # magnitude - whole is exact for every finite double
    rounded = float(whole + 1 if magnitude - whole >= 0.5 else whole)
    return math.copysign(rounded, amount) if rounded else 0.0

@dataclass(frozen=True)
class NumValue:
    kind: NumType
    amount: float

    @property
    def is_int(self) -> bool:
        return self.kind is NumType.INT

    def __repr__(self) -> str:
        if self.is_int and math.isfinite(self.amount):
            return f"{self.kind.tag}: {int(self.amount)}"
        return f"{self.kind.tag}: {self.amount!r}"

class NlMissing:
    """The canonical "no value" result. Not a number, not NaN."""
    _instance: Optional['NlMissing'] = None

    def __new__(cls) -> 'NlMissing':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "missing"

    def __bool__(self) -> bool:
        return False

MISSING = NlMissing()

NlValue: TypeAlias = Union[NumValue, NlMissing]

def make_value(amount: float, kind: NumType) -> NumValue:
    amount = float(amount)

    if kind is NumType.INT:
        amount = round_half_away(amount)

    return NumValue(kind, amount)

def int_value(amount: float) -> NumValue:
    return make_value(amount, NumType.INT)

def float_value(amount: float) -> NumValue:
    return make_value(amount, NumType.FLOAT)

def is_missing(value: object) -> TypeGuard[NlMissing]:
    return value is MISSING

def promote(values: Iterable[NumValue]) -> NumType:
    for v in values:
        if v.kind is NumType.FLOAT:
            return NumType.FLOAT

    return NumType.INT

# ---------- Exceptions ----------

class NumlispError(Exception):
    meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.meta = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        meta = getattr(self, "meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class NumlispTypeError(NumlispError):
    pass

class NumlispArityError(NumlispError):
    pass

class NumlispNodeError(NumlispError):
    pass

class NumlispInputError(NumlispError):
    pass

class NumlispRecursionError(NumlispError):
    pass

class UnresolvedSymbolError(NumlispError):
    def __init__(self, ident: str):
        super().__init__(f"Undefined symbol '{ident}'")
        self.ident = ident

class CircularDefinitionError(NumlispError):
    def __init__(self, ident: str):
        super().__init__(f"Definition of '{ident}' depends on itself")
        self.ident = ident
