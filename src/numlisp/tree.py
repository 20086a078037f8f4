"""AST node classes and the factories the front end builds them with.

Every node may own a scope table and carries a back-reference to its
enclosing node. The back-reference is only ever followed upwards for name
lookup; children are owned through `args`/`cond`/`if_true`/`if_false` and
the bindings of a node's table.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Union
from typing_extensions import TypeAlias, TypeGuard

from .diagnostics import DiagKind, DiagnosticSink, report
from .oper_types import Oper, arity_bounds, oper_name, resolve_oper
from .types import NumlispArityError, NumType, NumValue, make_value

if TYPE_CHECKING:
    from .scope import ScopeTable


@dataclass(eq=False)
class NumberNode:
    value: NumValue
    scope: Optional['ScopeTable'] = field(default=None, repr=False)
    parent: Optional['Node'] = field(default=None, repr=False)


@dataclass(eq=False)
class SymbolNode:
    ident: str
    scope: Optional['ScopeTable'] = field(default=None, repr=False)
    parent: Optional['Node'] = field(default=None, repr=False)


@dataclass(eq=False)
class CallNode:
    oper: Oper
    ident: Optional[str]
    args: List['Node'] = field(default_factory=list)
    # set once built-in arity has been validated
    checked: bool = field(default=False, repr=False)
    scope: Optional['ScopeTable'] = field(default=None, repr=False)
    parent: Optional['Node'] = field(default=None, repr=False)

    @property
    def name(self) -> str:
        if self.oper is Oper.CUSTOM:
            return self.ident or "<anonymous>"
        return oper_name(self.oper)


@dataclass(eq=False)
class CondNode:
    cond: 'Node'
    if_true: 'Node'
    if_false: 'Node'
    scope: Optional['ScopeTable'] = field(default=None, repr=False)
    parent: Optional['Node'] = field(default=None, repr=False)


Node: TypeAlias = Union[NumberNode, SymbolNode, CallNode, CondNode]

_NODE_TYPES = (NumberNode, SymbolNode, CallNode, CondNode)


def is_node(value: object) -> TypeGuard[Node]:
    return isinstance(value, _NODE_TYPES)


def _adopt(parent: Node, child: Node) -> Node:
    child.parent = parent
    return child


# ---------- factories ----------

def create_number(value: float, kind: NumType) -> NumberNode:
    return NumberNode(make_value(value, kind))


def create_symbol(ident: str) -> SymbolNode:
    return SymbolNode(ident)


def create_function_call(name: str, args: Optional[Sequence[Node]] = None,
                         sink: Optional[DiagnosticSink] = None) -> CallNode:
    arg_list = list(args or [])
    oper = resolve_oper(name)

    if oper is not Oper.CUSTOM:
        check_builtin_arity(oper, len(arg_list), sink)

    node = CallNode(oper, name if oper is Oper.CUSTOM else None, arg_list, checked=True)

    for arg in arg_list:
        _adopt(node, arg)

    return node


def check_builtin_arity(oper: Oper, count: int, sink: Optional[DiagnosticSink] = None) -> None:
    low, high = arity_bounds(oper)
    name = oper_name(oper)

    if count < low:
        raise NumlispArityError(f"{name} expects at least {low} argument(s); got {count}")

    if high is not None and count > high:
        report(sink, DiagKind.ARITY_TOO_MANY,
               f"{name} expects {high} argument(s); got {count}, extras ignored")


def create_conditional(cond: Node, if_true: Node, if_false: Node) -> CondNode:
    node = CondNode(cond, if_true, if_false)

    for child in (cond, if_true, if_false):
        _adopt(node, child)

    return node

