from __future__ import annotations

import math

from ..nodes import InfixOp, Unop
from ..types import PufNumber, PufString, PufValue
from ..utils import as_number, is_logically_true, truncates_to_zero, unexpected_type, values_equal

def _bool(flag: bool) -> PufNumber:
    return PufNumber(1.0 if flag else 0.0)

def apply_unary(op: Unop, operand: PufValue) -> PufValue:
    num = as_number(operand)

    match op:
        case Unop.NOT:
            return _bool(truncates_to_zero(num))
        case Unop.NEG:
            return PufNumber(-num)

    raise ValueError(f"Unknown unary operator {op}")

def _divide(lhs: float, rhs: float) -> float:
    if rhs != 0:
        return lhs / rhs

    if lhs == 0 or math.isnan(lhs):
        return math.nan

    # sign of an IEEE division by a signed zero
    return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)

def _modulo(lhs: float, rhs: float) -> float:
    try:
        return math.fmod(lhs, rhs)
    except ValueError:
        return math.nan

def _plus(lhs: PufValue, rhs: PufValue) -> PufValue:
    match lhs:
        case PufNumber(value=a):
            if not isinstance(rhs, PufNumber):
                raise unexpected_type(rhs)
            return PufNumber(a + rhs.value)
        case PufString(value=a):
            if not isinstance(rhs, PufString):
                raise unexpected_type(rhs)
            return PufString(a + rhs.value)
        case _:
            raise unexpected_type(lhs)

def apply_infix(op: InfixOp, lhs: PufValue, rhs: PufValue) -> PufValue:
    """Apply `lhs op rhs`; both operands are already evaluated."""
    match op:
        case InfixOp.PLUS:
            return _plus(lhs, rhs)
        case InfixOp.EQ:
            return _bool(values_equal(lhs, rhs))
        case InfixOp.NE:
            return _bool(not values_equal(lhs, rhs))

    a = as_number(lhs)
    b = as_number(rhs)

    match op:
        case InfixOp.MINUS:
            return PufNumber(a - b)
        case InfixOp.MUL:
            return PufNumber(a * b)
        case InfixOp.DIV:
            return PufNumber(_divide(a, b))
        case InfixOp.MOD:
            return PufNumber(_modulo(a, b))
        case InfixOp.LT:
            return _bool(a < b)
        case InfixOp.LE:
            return _bool(a <= b)
        case InfixOp.GT:
            return _bool(a > b)
        case InfixOp.GE:
            return _bool(a >= b)
        case InfixOp.AND:
            return _bool(is_logically_true(a) and is_logically_true(b))
        case InfixOp.OR:
            return _bool(is_logically_true(a) or is_logically_true(b))

    raise ValueError(f"Unknown operator {op}")
