"""Scope tables, bindings and the runtime environment chain.

Scope tables are built once by the front end and hang off AST nodes. At run
time the evaluator never writes into them: it allocates `Env` frames that
point at the tables, plus one activation frame per custom-function call.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence, Tuple, Union
from typing_extensions import TypeAlias

from .diagnostics import DiagKind, DiagnosticSink, report
from .tree import Node
from .types import NumType, UnresolvedSymbolError

if TYPE_CHECKING:
    from .runtime import Context


@dataclass(eq=False)
class VariableBinding:
    ident: str
    value: Node
    kind: Optional[NumType] = None

    @property
    def node(self) -> Node:
        return self.value


@dataclass(eq=False)
class FunctionBinding:
    ident: str
    body: Node
    kind: Optional[NumType] = None
    params: Tuple[str, ...] = ()

    @property
    def node(self) -> Node:
        return self.body


Binding: TypeAlias = Union[VariableBinding, FunctionBinding]


@dataclass(eq=False)
class ScopeTable:
    bindings: List[Binding] = field(default_factory=list)
    # another table attached to the same node, searched after this one
    enclosing: Optional['ScopeTable'] = field(default=None, repr=False)
    owner: Optional[Node] = field(default=None, repr=False)

    def find(self, ident: str) -> Optional[Binding]:
        for binding in self.bindings:
            if binding.ident == ident:
                return binding

        return None

    def __contains__(self, ident: object) -> bool:
        return isinstance(ident, str) and self.find(ident) is not None

    def __len__(self) -> int:
        return len(self.bindings)

    def idents(self) -> List[str]:
        return [b.ident for b in self.bindings]

    def inner_first(self) -> Iterator['ScopeTable']:
        table: Optional[ScopeTable] = self

        while table is not None:
            yield table
            table = table.enclosing


# ---------- factories ----------

def create_variable_binding(ident: str, value: Node, kind: Optional[NumType] = None) -> VariableBinding:
    return VariableBinding(ident, value, kind)


def create_function_binding(ident: str, body: Node, kind: Optional[NumType] = None,
                            params: Optional[Sequence[str]] = None,
                            sink: Optional[DiagnosticSink] = None) -> FunctionBinding:
    names = tuple(params or ())
    seen = set()

    for name in names:
        if name in seen:
            report(sink, DiagKind.CONFLICTING_DEFINITION,
                   f"Parameter '{name}' repeated in definition of '{ident}'")
        seen.add(name)

    return FunctionBinding(ident, body, kind, names)


def insert_binding(table: Optional[ScopeTable], binding: Binding,
                   sink: Optional[DiagnosticSink] = None) -> ScopeTable:
    if table is None:
        table = ScopeTable()

    if binding.ident in table:
        report(sink, DiagKind.CONFLICTING_DEFINITION,
               f"Conflicting definition of '{binding.ident}'")

    table.bindings.append(binding)

    if table.owner is not None:
        binding.node.parent = table.owner

    return table


def create_scope_table(bindings: Sequence[Binding] = (),
                       sink: Optional[DiagnosticSink] = None) -> ScopeTable:
    table = ScopeTable()

    for binding in bindings:
        insert_binding(table, binding, sink)

    return table


def attach_scope(node: Node, table: ScopeTable) -> Node:
    if table.owner is not None and table.owner is not node:
        raise ValueError("scope table already attached to another node")

    table.owner = node

    if node.scope is None:
        node.scope = table
    elif node.scope is not table:
        outermost = node.scope
        while outermost.enclosing is not None:
            outermost = outermost.enclosing
        outermost.enclosing = table

    for binding in table.bindings:
        binding.node.parent = node

    return node


# ---------- lookup ----------

def _owning_table(node: Node, child: Node) -> Optional[ScopeTable]:
    """The table on `node` whose binding value/body is `child`, if any."""
    if node.scope is None:
        return None

    for table in node.scope.inner_first():
        if any(binding.node is child for binding in table.bindings):
            return table

    return None


def resolve_binding(node: Node, ident: str) -> Binding:
    """
    Static lookup following the same rule as evaluation:
    - a node sees all of its own tables, innermost first;
    - a binding's value or body sees its own table and the tables attached
      around it, never a table nested inside it on the same node;
    - then each enclosing node in turn.
    """
    cur: Optional[Node] = node
    child: Optional[Node] = None

    while cur is not None:
        owning = _owning_table(cur, child) if child is not None else None
        start = owning if owning is not None else cur.scope

        if start is not None:
            for table in start.inner_first():
                found = table.find(ident)
                if found is not None:
                    return found

        child, cur = cur, cur.parent

    raise UnresolvedSymbolError(ident)


@dataclass(eq=False)
class Thunk:
    """An unevaluated argument plus the frame it must be evaluated in."""
    node: Node
    env: 'Env'


class Env:
    def __init__(self, parent: Optional['Env'] = None, table: Optional[ScopeTable] = None,
                 ctx: Optional['Context'] = None, params: Optional[Dict[str, Thunk]] = None,
                 label: Optional[str] = None):
        self.parent = parent
        self.table = table
        self.params: Dict[str, Thunk] = params if params is not None else {}
        self.label = label

        if ctx is not None:
            self.ctx = ctx
        elif parent is not None:
            self.ctx = parent.ctx
        else:
            raise ValueError("root Env requires a Context")

        self.depth: int = parent.depth + 1 if parent is not None else 0

    def extend(self, node: Node) -> 'Env':
        """Push frames for every table the node owns, outermost first."""
        if node.scope is None:
            return self

        env = self
        for table in reversed(list(node.scope.inner_first())):
            env = Env(parent=env, table=table)

        return env

    def lookup(self, ident: str) -> Tuple[Union[Binding, Thunk], 'Env']:
        cur: Optional[Env] = self

        while cur is not None:
            thunk = cur.params.get(ident)
            if thunk is not None:
                return thunk, cur

            if cur.table is not None:
                found = cur.table.find(ident)
                if found is not None:
                    return found, cur

            cur = cur.parent

        raise UnresolvedSymbolError(ident)

    def __repr__(self) -> str:
        names: List[str] = list(self.params)
        if self.table is not None:
            names.extend(self.table.idents())
        if self.label is not None:
            return f"<Env {self.label} depth={self.depth} names={names}>"
        return f"<Env depth={self.depth} names={names}>"
