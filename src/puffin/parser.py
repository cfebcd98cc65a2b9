from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from lark import Lark, Tree, UnexpectedInput

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

logger = logging.getLogger(__name__)

class PuffinSyntaxError(Exception):
    """Source text that does not parse (or does not form a valid program)."""

    def __init__(self, message: str, line: Optional[int]=None, column: Optional[int]=None, context: str=""):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.context = context

    def __str__(self) -> str:
        if self.line is None or self.line < 1:
            return self.message

        return f"{self.message} (line {self.line}, col {self.column})"

@lru_cache(maxsize=None)
def make_parser() -> Lark:
    """Compile the packaged grammar once per process."""
    logger.debug("building LALR parser from %s", GRAMMAR_PATH)

    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        lexer="basic",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
    )

def _describe(err: UnexpectedInput) -> str:
    token = getattr(err, "token", None)

    if token is None:
        char = getattr(err, "char", None)
        return f"Unexpected character {char!r}" if char else "Unexpected input"

    if token.type == "$END":
        saw = "end of input"
    else:
        saw = f"{token.type} {str(token)!r}"

    expected = ", ".join(sorted(getattr(err, "expected", None) or []))
    return f"Unexpected {saw}; expected one of: {expected}" if expected else f"Unexpected {saw}"

def parse_tree(src: str) -> Tree:
    try:
        return make_parser().parse(src)
    except UnexpectedInput as err:
        ctx = err.get_context(src, span=80) if err.pos_in_stream is not None else ""
        raise PuffinSyntaxError(_describe(err), err.line, err.column, ctx) from err
