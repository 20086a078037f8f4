from __future__ import annotations

import math
from typing import Any, Callable, Optional

from ..diagnostics import DiagKind
from ..types import NlValue, NumType, NumValue, NumlispTypeError, is_missing, make_value
from ..utils import float_precision

MISSING_TEXT = "NO_VALUE"

EvalFunc = Callable[[Any, Any], NlValue]

def _nonfinite(amount: float) -> Optional[str]:
    if math.isnan(amount):
        return "nan"

    if math.isinf(amount):
        return "inf" if amount > 0 else "-inf"

    return None

def format_value(value: Any, precision: Optional[int] = None) -> str:
    if is_missing(value):
        return MISSING_TEXT

    if not isinstance(value, NumValue):
        raise NumlispTypeError(f"Invalid value type {type(value).__name__} in format_value")

    special = _nonfinite(value.amount)

    match value.kind:
        case NumType.INT:
            body = special if special is not None else str(math.floor(value.amount))
        case NumType.FLOAT:
            digits = float_precision() if precision is None else precision
            body = special if special is not None else f"{value.amount:.{digits}f}"
        case _:
            raise NumlispTypeError(f"Invalid type {value.kind!r} in format_value")

    return f"{value.kind.tag}: {body}"

def coerce_declared(value: NlValue, declared: Optional[NumType], ident: str, ctx: Any) -> NlValue:
    """Retag a value to a binding's declared type; narrowing FLOAT->INT warns."""
    if declared is None or is_missing(value):
        return value

    if value.kind is declared:
        return value

    if declared is NumType.INT:
        ctx.warn(DiagKind.PRECISION_LOSS,
                 f"Precision loss assigning FLOAT {value.amount!r} to INT '{ident}'")

    return make_value(value.amount, declared)
