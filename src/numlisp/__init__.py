"""numlisp: evaluation core for a small typed numeric Lisp."""

from .diagnostics import CollectingSink, DiagKind, Diagnostic, NullSink, Severity, StreamSink
from .eval.common import format_value
from .evaluator import EvalResult, eval_node, evaluate, evaluate_result
from .oper_types import ArityClass, Oper, arity_class, resolve_oper
from .scope import (
    FunctionBinding,
    ScopeTable,
    VariableBinding,
    attach_scope,
    create_function_binding,
    create_scope_table,
    create_variable_binding,
    insert_binding,
    resolve_binding,
)
from .tree import (
    CallNode,
    CondNode,
    NumberNode,
    SymbolNode,
    create_conditional,
    create_function_call,
    create_number,
    create_symbol,
)
from .types import (
    MISSING,
    NumType,
    NumValue,
    NumlispArityError,
    NumlispError,
    NumlispTypeError,
    UnresolvedSymbolError,
    is_missing,
    make_value,
)

__all__ = [
    "ArityClass",
    "CallNode",
    "CollectingSink",
    "CondNode",
    "DiagKind",
    "Diagnostic",
    "EvalResult",
    "FunctionBinding",
    "MISSING",
    "NullSink",
    "NumType",
    "NumValue",
    "NumberNode",
    "NumlispArityError",
    "NumlispError",
    "NumlispTypeError",
    "Oper",
    "ScopeTable",
    "Severity",
    "StreamSink",
    "SymbolNode",
    "UnresolvedSymbolError",
    "VariableBinding",
    "arity_class",
    "attach_scope",
    "create_conditional",
    "create_function_binding",
    "create_function_call",
    "create_number",
    "create_scope_table",
    "create_symbol",
    "create_variable_binding",
    "eval_node",
    "evaluate",
    "evaluate_result",
    "format_value",
    "insert_binding",
    "is_missing",
    "make_value",
    "resolve_binding",
    "resolve_oper",
]
