from __future__ import annotations

import io

import pytest

from numlisp import (
    CallNode,
    CollectingSink,
    DiagKind,
    Oper,
    StreamSink,
    attach_scope,
    create_function_call,
    create_number,
    create_scope_table,
    create_symbol,
    create_variable_binding,
    evaluate,
    evaluate_result,
    format_value,
)
from numlisp.diagnostics import Diagnostic, NullSink, Severity, default_sink, report
from numlisp.runtime import get_builtin
from numlisp.types import MISSING, NlMissing, NumType, UnresolvedSymbolError, is_missing
from tests.support.harness import (
    CircularDefinitionError,
    NumlispArityError,
    NumlispError,
    NumlispNodeError,
    NumlispRecursionError,
    NumlispTypeError,
    run_program,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param("(let ((x (add x 1))) x)", None, CircularDefinitionError, id="self-reference"),
    pytest.param(
        "(let ((a b) (b (add a 1))) a)",
        None,
        CircularDefinitionError,
        id="mutual-reference",
    ),
    pytest.param(
        "(let ((a 1) (b (add a 1))) (add a b))",
        ("int", 3),
        None,
        id="acyclic-chain",
    ),
    pytest.param(
        "(let ((x 2)) (add x (let ((x (mult x 3))) x)))",
        None,
        CircularDefinitionError,
        id="inner-self-reference",
    ),
    pytest.param("(hypot 1)", None, NumlispArityError, id="binary-one-arg"),
    pytest.param("(sqrt)", None, NumlispArityError, id="unary-no-args"),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_error_handling(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_errors_share_a_base_class() -> None:
    for exc_type in (CircularDefinitionError, NumlispArityError, NumlispNodeError,
                     NumlispRecursionError, NumlispTypeError):
        assert issubclass(exc_type, NumlispError)


def test_circular_definition_names_the_binding() -> None:
    with pytest.raises(CircularDefinitionError) as exc_info:
        run_program("(let ((loop (add loop 1))) loop)")

    assert exc_info.value.ident == "loop"


def test_evaluate_rejects_foreign_node() -> None:
    with pytest.raises(NumlispNodeError):
        evaluate("hello", sink=CollectingSink())


def test_evaluate_none_gives_missing() -> None:
    assert is_missing(evaluate(None, sink=CollectingSink()))


def test_foreign_argument_node_rejected() -> None:
    node = CallNode(Oper.ADD, None, [create_number(1, NumType.INT), 2.5])

    with pytest.raises(NumlispNodeError):
        evaluate(node, sink=CollectingSink())


def test_hand_built_call_checked_at_evaluation() -> None:
    node = CallNode(Oper.NEG, None, [])

    with pytest.raises(NumlispArityError):
        evaluate(node, sink=CollectingSink())


def test_hand_built_call_extra_args_warn_once_per_run() -> None:
    node = CallNode(Oper.ABS, None, [create_number(1, NumType.INT), create_number(2, NumType.INT)])
    sink = CollectingSink()

    evaluate(node, sink=sink)

    assert sink.kinds() == [DiagKind.ARITY_TOO_MANY]
    assert node.checked is False


def test_factory_extra_args_warn_at_construction() -> None:
    sink = CollectingSink()

    node = create_function_call(
        "abs", [create_number(-1, NumType.INT), create_number(3, NumType.INT)], sink
    )

    assert sink.kinds() == [DiagKind.ARITY_TOO_MANY]
    assert node.checked is True


def test_factory_too_few_args_raises() -> None:
    with pytest.raises(NumlispArityError):
        create_function_call("pow", [create_number(2, NumType.INT)])


def test_custom_call_to_unknown_function_strict() -> None:
    node = create_function_call("undefined_fn", [create_number(1, NumType.INT)])

    with pytest.raises(UnresolvedSymbolError):
        evaluate(node, sink=CollectingSink(), strict=True)


def test_missing_operand_propagates_after_evaluating_all() -> None:
    out = io.StringIO()
    node = create_function_call("add", [
        create_symbol("absent"),
        create_function_call("print", [create_number(4, NumType.INT)]),
    ])

    result = evaluate(node, sink=CollectingSink(), stdout=out)

    assert is_missing(result)
    assert out.getvalue() == "INT_TYPE: 4\n"


def test_get_builtin_rejects_custom() -> None:
    with pytest.raises(NumlispNodeError):
        get_builtin(Oper.CUSTOM)


def test_format_value_rejects_non_values() -> None:
    with pytest.raises(NumlispTypeError):
        format_value(3.5)

    with pytest.raises(NumlispTypeError):
        format_value(create_number(1, NumType.INT))


def test_evaluate_result_collects_error_and_warnings() -> None:
    # (add ghost (let ((x (add x 1))) x))
    ref = create_symbol("x")
    attach_scope(ref, create_scope_table([
        create_variable_binding("x", create_function_call("add", [
            create_symbol("x"), create_number(1, NumType.INT),
        ])),
    ]))
    root = create_function_call("add", [create_symbol("ghost"), ref])

    result = evaluate_result(root)

    assert not result.ok
    assert isinstance(result.error, CircularDefinitionError)
    assert is_missing(result.value)
    assert [d.kind for d in result.diagnostics] == [DiagKind.UNRESOLVED_SYMBOL]


def test_evaluate_result_unresolved_is_not_fatal() -> None:
    result = evaluate_result(create_function_call("add", [create_symbol("ghost")]))

    assert result.ok
    assert is_missing(result.value)
    assert [d.kind for d in result.diagnostics] == [DiagKind.UNRESOLVED_SYMBOL]
    assert result.diagnostics[0].severity is Severity.ERROR


def test_stream_sink_formats_severity() -> None:
    buf = io.StringIO()
    sink = StreamSink(buf)

    report(sink, DiagKind.PRECISION_LOSS, "narrowed")
    report(sink, DiagKind.UNRESOLVED_SYMBOL, "gone", Severity.ERROR)

    assert buf.getvalue() == "WARNING: narrowed\nERROR: gone\n"


def test_stream_sink_defaults_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    evaluate(create_symbol("ghost"), sink=StreamSink())

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "ERROR: Undefined symbol 'ghost'" in captured.err


def test_quiet_mode_silences_default_sink(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NUMLISP_QUIET", "1")

    assert isinstance(default_sink(), NullSink)


def test_diagnostic_str() -> None:
    assert str(Diagnostic(DiagKind.INVALID_TYPE, "bad type", Severity.ERROR)) == "ERROR: bad type"


def test_missing_is_falsy_singleton() -> None:
    assert NlMissing() is MISSING
    assert not MISSING
    assert repr(MISSING) == "missing"
