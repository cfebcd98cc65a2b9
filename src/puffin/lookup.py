"""Operator tables: source spelling -> typed operator with precedence."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Tuple

from .nodes import (
    Associativity,
    Call,
    Dot,
    Exp,
    Infix,
    InfixOp,
    Operator,
    Subscript,
    Unary,
    Unop,
)

KEYWORDS = frozenset({"fn", "in", "if", "else", "return", "for", "while", "null"})

UNARY_PRECEDENCE = 6
POSTFIX_PRECEDENCE = 7

# lowest binds loosest
_INFIX_TABLE: Dict[str, Tuple[InfixOp, int]] = {
    "||": (InfixOp.OR, 0),
    "&&": (InfixOp.AND, 1),
    "==": (InfixOp.EQ, 2),
    "!=": (InfixOp.NE, 2),
    "<": (InfixOp.LT, 3),
    "<=": (InfixOp.LE, 3),
    ">": (InfixOp.GT, 3),
    ">=": (InfixOp.GE, 3),
    "-": (InfixOp.MINUS, 4),
    "+": (InfixOp.PLUS, 4),
    "/": (InfixOp.DIV, 5),
    "%": (InfixOp.MOD, 5),
    "*": (InfixOp.MUL, 5),
}

_UNARY_TABLE: Dict[str, Unop] = {
    "!": Unop.NOT,
    "-": Unop.NEG,
}

class UnknownOperator(ValueError):
    def __init__(self, symbol: str):
        super().__init__(f"Unknown operator '{symbol}'")
        self.symbol = symbol

@lru_cache(maxsize=None)
def _infix_entry(symbol: str) -> Tuple[InfixOp, int]:
    try:
        return _INFIX_TABLE[symbol]
    except KeyError:
        raise UnknownOperator(symbol) from None

def infix(symbol: str) -> Operator:
    op, prec = _infix_entry(symbol)
    return Operator(Infix(op), Associativity.LEFT, prec)

def unary(symbol: str) -> Operator:
    try:
        unop = _UNARY_TABLE[symbol]
    except KeyError:
        raise UnknownOperator(symbol) from None

    return Operator(Unary(unop), Associativity.RIGHT, UNARY_PRECEDENCE)

def call(args: List[Exp]) -> Operator:
    return Operator(Call(args), Associativity.LEFT, POSTFIX_PRECEDENCE)

def subscript(index: Exp) -> Operator:
    return Operator(Subscript(index), Associativity.LEFT, POSTFIX_PRECEDENCE)

def dot(name: str) -> Operator:
    return Operator(Dot(name), Associativity.LEFT, POSTFIX_PRECEDENCE)

def compound_infix(assign_op: str) -> Operator:
    """Map `+=`-style assignment operators to their infix operator."""
    if len(assign_op) != 2 or not assign_op.endswith("="):
        raise UnknownOperator(assign_op)

    return infix(assign_op[0])

def is_keyword(name: str) -> bool:
    return name in KEYWORDS
