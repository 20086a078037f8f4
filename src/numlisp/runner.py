from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import Optional, TextIO

from .diagnostics import DiagnosticSink
from .eval.common import format_value
from .evaluator import evaluate
from .reader import parse
from .runtime import init_stdlib
from .types import NlValue, NumlispError
from .utils import debug_py_trace_enabled


def run(src: str, *, sink: Optional[DiagnosticSink] = None, stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None, strict: Optional[bool] = None) -> NlValue:
    """Parse one expression and evaluate it."""
    init_stdlib()
    ast = parse(src, sink=sink)

    return evaluate(ast, sink=sink, stdin=stdin, stdout=stdout, strict=strict)


def repl_eval(text: str, *, sink: Optional[DiagnosticSink] = None, strict: Optional[bool] = None) -> str:
    """Evaluate one REPL entry and return the text to show for it."""
    return format_value(run(text, sink=sink, strict=strict))


def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg


def report_error(exc: BaseException) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_exception(exc)), file=sys.stderr, end="")


def main(argv: Optional[list[str]] = None) -> int:
    arg = None
    strict: Optional[bool] = None
    start_repl = False

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--repl":
            start_repl = True
            continue

        if token == "--strict":
            strict = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if start_repl:
        from .repl import repl

        repl(strict=strict)
        return 0

    source = _load_source(arg)

    try:
        result = run(source, strict=strict)
    except NumlispError as exc:
        report_error(exc)
        return 1

    print(format_value(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
