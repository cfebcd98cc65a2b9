"""Interactive REPL for Puffin, powered by prompt_toolkit."""

from __future__ import annotations

import logging
import re
import sys
from typing import List, Tuple

from lark import UnexpectedInput
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .config import debug_py_trace_enabled, set_debug_py_trace
from .evaluator import ReplSession
from .parser import PuffinSyntaxError, make_parser
from .runner import repl_eval, report_runtime_error, report_syntax_error
from .types import PufNull, PuffinRuntimeError
from .utils import display

logger = logging.getLogger(__name__)

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_CLOSERS = {")", "]", "}"}
_TERMINATORS = {";", "}"}

def is_complete(text: str) -> bool:
    """True when brackets balance and the input ends a statement.

    A trailing `}` that closes an `if` block is not complete yet,
    since an `else` may follow on the next line; a blank line submits it.
    Text that does not even lex counts as complete so the parser can report it.
    """
    try:
        tokens = [str(tok) for tok in make_parser().lex(text)]
    except UnexpectedInput:
        return True

    if not tokens:
        return True

    # each open bracket remembers whether it belongs to an if
    stack: List[Tuple[str, bool]] = []
    prev = ""
    closed_if_paren = False
    closed_if_block = False

    for tok in tokens:
        if tok == "(":
            stack.append((tok, prev == "if"))
        elif tok == "{":
            stack.append((tok, prev == ")" and closed_if_paren))
        elif tok == "[":
            stack.append((tok, False))
        elif tok in _CLOSERS and stack:
            _, for_if = stack.pop()
            closed_if_paren = tok == ")" and for_if
            closed_if_block = tok == "}" and for_if

        prev = tok

    if stack or tokens[-1] not in _TERMINATORS:
        return False

    return not (tokens[-1] == "}" and closed_if_block)

class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )

def handle_slash(line: str, session: ReplSession) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1].lower() if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg in ("on", "1", "true", "yes"):
            set_debug_py_trace(True)
        elif arg in ("off", "0", "false", "no"):
            set_debug_py_trace(False)
        elif arg == "":
            set_debug_py_trace(not debug_py_trace_enabled())
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        session.reset()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True

def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)

def eval_and_echo(text: str, session: ReplSession) -> None:
    """Evaluate one submission; echo a non-null result, report errors."""
    try:
        result = repl_eval(text, session)
    except PuffinSyntaxError as exc:
        report_syntax_error(exc)
        return
    except PuffinRuntimeError as exc:
        report_runtime_error(exc)
        return
    except RecursionError:
        print("Error: stack overflow (recursion limit exceeded)", file=sys.stderr)
        return
    finally:
        sys.stdout.flush()

    if not isinstance(result, PufNull):
        print(display(result))

def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    session = ReplSession()
    history = InMemoryHistory()
    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # a blank trailing line submits whatever is there
        if text.startswith("/") or is_complete(text) or text.split("\n")[-1].strip() == "":
            buf.validate_and_handle()
            return

        buf.insert_text("\n")

    prompt: PromptSession[str] = PromptSession(
        history=history,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("puffin repl: Ctrl-D to exit, / for commands")

    while True:
        try:
            text = prompt.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if handle_slash(text, session):
            continue

        eval_and_echo(text, session)

    logger.debug("repl session ended")
