from __future__ import annotations

from typing import Optional

import pytest

from numlisp import CallNode, CondNode, FunctionBinding, NumberNode, Oper, SymbolNode, VariableBinding
from numlisp.types import NumType
from tests.support.harness import CollectingSink, DiagKind, NumlispArityError, ParseError, parse


def check_call(node) -> None:
    assert isinstance(node, CallNode)
    assert node.oper is Oper.ADD
    assert node.ident is None
    assert node.name == "add"
    assert [type(a) for a in node.args] == [NumberNode, CallNode]
    assert node.args[1].oper is Oper.MULT


def check_custom(node) -> None:
    assert isinstance(node, CallNode)
    assert node.oper is Oper.CUSTOM
    assert node.ident == "square"
    assert node.name == "square"


def check_cond(node) -> None:
    assert isinstance(node, CondNode)
    assert isinstance(node.cond, CallNode) and node.cond.oper is Oper.LESS
    assert node.if_true.value.kind is NumType.INT
    assert node.if_false.value.kind is NumType.FLOAT


def check_let(node) -> None:
    assert isinstance(node, SymbolNode)
    assert node.scope is not None
    assert node.scope.idents() == ["x", "y"]
    x, y = node.scope.bindings
    assert isinstance(x, VariableBinding) and x.kind is NumType.INT
    assert isinstance(y, VariableBinding) and y.kind is None


def check_lambda(node) -> None:
    binding = node.scope.find("f")
    assert isinstance(binding, FunctionBinding)
    assert binding.params == ("a", "b")
    assert binding.kind is NumType.FLOAT
    assert binding.body.parent is node


def check_literals(node) -> None:
    kinds = [a.value.kind for a in node.args]
    amounts = [a.value.amount for a in node.args]
    assert kinds == [NumType.INT, NumType.FLOAT, NumType.FLOAT, NumType.INT, NumType.FLOAT]
    assert amounts == [-3.0, 0.5, 2.0, 7.0, -0.25]


def check_type_aliases(node) -> None:
    kinds = [b.kind for b in node.scope.bindings]
    assert kinds == [NumType.INT, NumType.INT, NumType.FLOAT, NumType.FLOAT]


CHECKERS = {
    "check_call": check_call,
    "check_custom": check_custom,
    "check_cond": check_cond,
    "check_let": check_let,
    "check_lambda": check_lambda,
    "check_literals": check_literals,
    "check_type_aliases": check_type_aliases,
    None: None,
}

EXCEPTIONS = {
    "ParseError": ParseError,
    "NumlispArityError": NumlispArityError,
    None: None,
}

AST_CASES = [
    ("builtin-call", "(add 1 (mult 2 3))", "check_call", None),
    ("custom-call", "(square 4)", "check_custom", None),
    ("conditional", "(cond (less 1 2) 3 4.0)", "check_cond", None),
    ("let-bindings", "(let ((x 1 : int) (y 2)) x)", "check_let", None),
    ("lambda-binding", "(let ((f lambda (a b) (add a b) : double)) (f 1 2))", "check_lambda", None),
    ("literals", "(add -3 .5 2. 7 -0.25)", "check_literals", None),
    ("type-aliases", "(let ((a 1 : int) (b 1 : integer) (c 1 : float) (d 1 : double)) a)",
     "check_type_aliases", None),
    ("comment", "; leading note\n(square 4) ; trailing", "check_custom", None),
    ("unbalanced", "(add 1", None, "ParseError"),
    ("extra-close", "(add 1))", None, "ParseError"),
    ("empty", "", None, "ParseError"),
    ("bad-char", "(add 1 #)", None, "ParseError"),
    ("let-without-defs", "(let () 1)", None, "ParseError"),
    ("arity-at-parse", "(exp)", None, "NumlispArityError"),
]


@pytest.mark.parametrize(
    "source, checker_name, expected_exc_name",
    [pytest.param(code, checker, exc, id=name) for name, code, checker, exc in AST_CASES],
)
def test_ast_shapes(source: str, checker_name: Optional[str], expected_exc_name: Optional[str]) -> None:
    checker = CHECKERS[checker_name]
    expected_exc = EXCEPTIONS[expected_exc_name]

    if expected_exc is not None:
        with pytest.raises(expected_exc):
            parse(source, sink=CollectingSink())
        return

    node = parse(source, sink=CollectingSink())
    if checker is not None:
        checker(node)


def test_parent_pointers_set_by_factories() -> None:
    root = parse("(add 1 (cond 1 (neg 2) (let ((z 5)) z)))")
    one, cond = root.args
    ref = cond.if_false

    assert root.parent is None
    assert one.parent is root and cond.parent is root
    assert cond.cond.parent is cond and cond.if_true.parent is cond and ref.parent is cond
    assert cond.if_true.args[0].parent is cond.if_true


def test_binding_values_point_at_owning_node() -> None:
    root = parse("(let ((x (mult 2 3))) (add x 1))")
    value = root.scope.find("x").value

    assert value.parent is root
    assert all(arg.parent is value for arg in value.args)


def test_nested_let_on_same_node_links_tables() -> None:
    node = parse("(let ((a 1)) (let ((b 2)) (add a b)))")

    assert node.scope.idents() == ["b"]
    assert node.scope.enclosing is not None
    assert node.scope.enclosing.idents() == ["a"]
    assert node.scope.enclosing.owner is node


def test_parse_error_carries_position() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse("(add 1\n  2 ))")

    err = exc_info.value
    assert err.line == 2
    assert err.column is not None
    assert "line 2" in str(err)


def test_parse_reports_arity_warning_to_sink() -> None:
    sink = CollectingSink()

    parse("(neg 1 2)", sink=sink)

    assert sink.kinds() == [DiagKind.ARITY_TOO_MANY]


def test_parse_reports_conflicts_to_sink() -> None:
    sink = CollectingSink()

    parse("(let ((x 1) (x 2)) x)", sink=sink)

    assert sink.kinds() == [DiagKind.CONFLICTING_DEFINITION]


def test_unknown_type_reported_as_error_and_ignored() -> None:
    sink = CollectingSink()

    node = parse("(let ((x 1.5 : quad)) x)", sink=sink)

    assert node.scope.find("x").kind is None
    assert sink.kinds() == [DiagKind.INVALID_TYPE]
    assert sink.items[0].severity.value == "ERROR"
