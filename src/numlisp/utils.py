from __future__ import annotations

import os as _os
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    raw = _os.environ.get(name)
    if raw is None:
        return False

    return raw.strip().lower() in _TRUTHY


def strict_symbols_enabled() -> bool:
    """Unresolved symbols raise instead of evaluating to the missing value."""
    return _env_flag("NUMLISP_STRICT")


def quiet_enabled() -> bool:
    return _env_flag("NUMLISP_QUIET")


def debug_py_trace_enabled() -> bool:
    return _env_flag("NUMLISP_DEBUG_PY_TRACE")


def float_precision() -> int:
    raw = _os.environ.get("NUMLISP_FLOAT_PRECISION")
    if raw is None:
        return 6

    try:
        digits = int(raw)
    except ValueError:
        return 6

    return max(0, digits)


def rand_seed() -> Optional[int]:
    raw = _os.environ.get("NUMLISP_SEED")
    if raw is None or not raw.strip():
        return None

    try:
        return int(raw)
    except ValueError:
        return None
