"""Text front end: s-expressions -> AST via the node and scope factories."""

from __future__ import annotations

from typing import List, Optional

from types import SimpleNamespace

from lark import Lark, Token, Transformer, UnexpectedInput, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken
from lark.exceptions import VisitError

from .diagnostics import DiagKind, DiagnosticSink, Severity, report
from .scope import (
    Binding,
    ScopeTable,
    attach_scope,
    create_function_binding,
    create_variable_binding,
    insert_binding,
)
from .tree import Node, create_conditional, create_function_call, create_number, create_symbol
from .types import NumlispError, NumlispTypeError, NumType, resolve_type

GRAMMAR = r"""
?start: expr

?expr: INT                                   -> int_literal
     | FLOAT                                 -> float_literal
     | SYMBOL                                -> symbol
     | "(" SYMBOL expr* ")"                  -> call
     | "(" "let" "(" definition+ ")" expr ")" -> let_expr
     | "(" "cond" expr expr expr ")"         -> cond_expr

definition: "(" SYMBOL expr type_annot? ")"                            -> var_def
          | "(" SYMBOL "lambda" "(" params ")" expr type_annot? ")"   -> fn_def

params: SYMBOL*
type_annot: ":" SYMBOL

FLOAT.2: /[+-]?(\d+\.\d*|\.\d+)/
INT: /[+-]?\d+/
SYMBOL: /[A-Za-z_][A-Za-z0-9_]*/
COMMENT: /;[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
"""


class ParseError(NumlispError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column

        if line is not None:
            self.meta = SimpleNamespace(line=line, column=column)


_PARSER: Optional[Lark] = None


def make_parser() -> Lark:
    global _PARSER

    if _PARSER is None:
        _PARSER = Lark(GRAMMAR, parser="lalr", start="start", propagate_positions=False)

    return _PARSER


@v_args(inline=True)
class BuildAst(Transformer):
    """Calls the factories bottom-up; the front end never builds nodes itself."""

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        super().__init__()
        self.sink = sink

    def int_literal(self, tok: Token) -> Node:
        return create_number(float(tok), NumType.INT)

    def float_literal(self, tok: Token) -> Node:
        return create_number(float(tok), NumType.FLOAT)

    def symbol(self, tok: Token) -> Node:
        return create_symbol(str(tok))

    def call(self, name: Token, *args: Node) -> Node:
        return create_function_call(str(name), list(args), self.sink)

    def cond_expr(self, cond: Node, if_true: Node, if_false: Node) -> Node:
        return create_conditional(cond, if_true, if_false)

    def let_expr(self, *children) -> Node:
        *definitions, body = children
        table: Optional[ScopeTable] = None

        for binding in definitions:
            table = insert_binding(table, binding, self.sink)

        if table is not None:
            attach_scope(body, table)

        return body

    def params(self, *names: Token) -> List[str]:
        return [str(n) for n in names]

    def type_annot(self, name: Token) -> Optional[NumType]:
        try:
            return resolve_type(str(name))
        except NumlispTypeError as exc:
            report(self.sink, DiagKind.INVALID_TYPE, f"{exc}; treating as untyped", Severity.ERROR)
            return None

    def var_def(self, name: Token, value: Node, kind: Optional[NumType] = None) -> Binding:
        return create_variable_binding(str(name), value, kind)

    def fn_def(self, name: Token, params: List[str], body: Node, kind: Optional[NumType] = None) -> Binding:
        return create_function_binding(str(name), body, kind, params, self.sink)


def _describe(exc: UnexpectedInput) -> str:
    match exc:
        case UnexpectedEOF():
            return "Unexpected end of input"
        case UnexpectedToken(token=tok):
            if tok.type == "$END":
                return "Unexpected end of input"
            return f"Unexpected token {str(tok)!r}"
        case UnexpectedCharacters(char=ch):
            return f"Unexpected character {ch!r}"
        case _:
            return "Syntax error"


def parse(source: str, sink: Optional[DiagnosticSink] = None) -> Node:
    try:
        tree = make_parser().parse(source)
    except UnexpectedInput as exc:
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        raise ParseError(_describe(exc), line, column) from exc

    try:
        return BuildAst(sink).transform(tree)
    except VisitError as exc:
        orig = exc.orig_exc
        if isinstance(orig, NumlispError):
            raise orig from None
        raise
