from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .builder import build_program
from .config import Settings, debug_py_trace_enabled, setup_logging
from .evaluator import ReplSession, eval_program
from .nodes import Program
from .parser import PuffinSyntaxError, parse_tree
from .types import Environment, PufNull, PufValue, PuffinRuntimeError
from .utils import display

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_SYNTAX_ERROR = 2
EXIT_STACK_OVERFLOW = 3

def parse(src: str) -> Program:
    return build_program(parse_tree(src))

def run(src: str, env: Optional[Environment]=None) -> PufValue:
    """Parse and evaluate a whole program; expression statements are discarded."""
    return eval_program(parse(src), env)

def repl_eval(src: str, session: ReplSession) -> PufValue:
    """Evaluate interactively: the last surfaced value, or null."""
    return session.eval_statements(parse(src).statements)

def _load_source(arg: str) -> str:
    """
    Resolve CLI input into source text.
    - "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """
    if arg == "-":
        return sys.stdin.read()

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def report_runtime_error(exc: BaseException) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def report_syntax_error(exc: PuffinSyntaxError) -> None:
    print(f"SyntaxError: {exc}", file=sys.stderr)

    if exc.context:
        print(exc.context, file=sys.stderr, end="" if exc.context.endswith("\n") else "\n")

def _arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="puffin", description="Run a Puffin program or start the REPL.")
    ap.add_argument("source", nargs="?", help="Path to a source file, '-' for stdin, or literal source; omit for the REPL")
    ap.add_argument("--log-level", default=None, help="Logging level (default: $PUFFIN_LOG_LEVEL or WARNING)")
    ap.add_argument("--log-file", default=None, help="Write logs to this file instead of stderr")
    ap.add_argument("--recursion-limit", type=int, default=None, help="Host recursion limit for evaluation")
    return ap

def main(argv: Optional[List[str]]=None) -> int:
    args = _arg_parser().parse_args(argv)

    settings = Settings.from_env()
    if args.log_level:
        settings.log_level = args.log_level
    if args.log_file:
        settings.log_file = args.log_file
    if args.recursion_limit and args.recursion_limit > 0:
        settings.recursion_limit = args.recursion_limit

    setup_logging(settings.log_level, settings.log_file)
    sys.setrecursionlimit(settings.recursion_limit)

    if args.source is None:
        from .repl import repl

        repl()
        return EXIT_OK

    try:
        source = _load_source(args.source)
    except OSError as exc:
        print(f"Error: cannot read {args.source}: {exc}", file=sys.stderr)
        return EXIT_SYNTAX_ERROR

    try:
        result = run(source)
    except PuffinSyntaxError as exc:
        report_syntax_error(exc)
        return EXIT_SYNTAX_ERROR
    except PuffinRuntimeError as exc:
        report_runtime_error(exc)
        return EXIT_RUNTIME_ERROR
    except RecursionError:
        logger.info("recursion limit %d exhausted", settings.recursion_limit)
        print("Fatal: stack overflow (recursion limit exceeded)", file=sys.stderr)
        return EXIT_STACK_OVERFLOW
    finally:
        sys.stdout.flush()

    if not isinstance(result, PufNull):
        print(display(result))

    return EXIT_OK

if __name__ == "__main__":
    sys.exit(main())
