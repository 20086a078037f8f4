"""Interactive read-eval-print loop for numlisp, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .runner import report_error, repl_eval
from .runtime import init_stdlib
from .types import NumlispError
from .utils import debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/strict": ("Toggle raising on undefined symbols", "[on|off]"),
}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


def paren_depth(text: str) -> int:
    """Net count of open parentheses, ignoring `;` comments."""
    depth = 0

    for line in text.split("\n"):
        code = line.split(";", 1)[0]
        depth += code.count("(") - code.count(")")

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, _hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _toggle(arg: str, current: bool) -> Optional[bool]:
    lowered = arg.lower()

    if lowered in _ON:
        return True
    if lowered in _OFF:
        return False
    if lowered == "":
        return not current

    return None


def _handle_slash(line: str, state: dict) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        flag = _toggle(arg, debug_py_trace_enabled())
        if flag is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        if flag:
            os.environ["NUMLISP_DEBUG_PY_TRACE"] = "1"
        else:
            os.environ.pop("NUMLISP_DEBUG_PY_TRACE", None)
        print(f"Python traceback: {'on' if flag else 'off'}")
        return True

    if cmd == "/strict":
        flag = _toggle(arg, bool(state.get("strict")))
        if flag is None:
            print("Usage: /strict [on|off]", file=sys.stderr)
            return True

        state["strict"] = flag
        print(f"Strict symbols: {'on' if flag else 'off'}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl(strict: Optional[bool] = None) -> None:
    init_stdlib()
    state = {"strict": strict}

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer

        # unbalanced parens => keep reading on a continuation line
        if not buf.text.startswith("/") and paren_depth(buf.text) > 0:
            buf.insert_text("\n  ")
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("numlisp repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = session.prompt("> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, state):
            continue

        try:
            shown = repl_eval(text, strict=state["strict"])
        except NumlispError as exc:
            report_error(exc)
            continue

        print(shown)
