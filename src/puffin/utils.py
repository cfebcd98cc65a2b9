from __future__ import annotations

import math
import sys
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple

from .types import (
    Anonymous,
    Named,
    PufArray,
    PufBuiltin,
    PufClosure,
    PufNull,
    PufNumber,
    PufString,
    PufStructure,
    PufValue,
    PuffinTypeError,
    Receiver,
)

# placeholder for a container that is already being printed
CIRCULAR_REF = "..."

EPSILON = sys.float_info.epsilon


def format_number(num: float) -> str:
    """Shortest round-trip digits, always positional (never exponent form)."""
    num = float(num)

    if math.isnan(num):
        return "NaN"

    if math.isinf(num):
        return "inf" if num > 0 else "-inf"

    if num == 0:
        return "-0" if math.copysign(1.0, num) < 0 else "0"

    text = repr(num)

    if "e" in text:
        # Decimal keeps exactly the digits repr chose
        text = format(Decimal(text), "f")

    return text[:-2] if text.endswith(".0") else text


def display(value: PufValue) -> str:
    """Text form of any value (strings quoted); shared by the shell, `str` and `print`."""
    return _display(value, set())


def _display(value: PufValue, seen: Set[int]) -> str:
    match value:
        case PufNull():
            return "null"
        case PufNumber(value=num):
            return format_number(num)
        case PufString(value=s):
            return f"'{s}'"
        case PufArray(items=items):
            seen.add(id(value))
            return "[" + ", ".join(_display_nested(item, seen) for item in items) + "]"
        case PufStructure(fields=fields):
            seen.add(id(value))
            pairs = [f"{name}: {_display_nested(item, seen)}" for name, item in fields.items()]
            return "{" + ", ".join(pairs) + "}"
        case PufClosure(params=params):
            return f"<{closure_label(value)} fn({', '.join(params)})>"
        case PufBuiltin(name=name):
            return f"<Builtin Function: {name}>"
        case _:
            raise PuffinTypeError(f"not a Puffin value: {type(value).__name__}")


def _display_nested(value: PufValue, seen: Set[int]) -> str:
    if isinstance(value, PufArray) and id(value) in seen:
        return f"[{CIRCULAR_REF}]"

    if isinstance(value, PufStructure) and id(value) in seen:
        return f"{{{CIRCULAR_REF}}}"

    return _display(value, seen)


def values_equal(lhs: PufValue, rhs: PufValue) -> bool:
    return _equal(lhs, rhs, set())


def _equal(lhs: PufValue, rhs: PufValue, active: Set[Tuple[int, int]]) -> bool:
    match (lhs, rhs):
        case (PufNull(), PufNull()):
            return True
        case (PufNumber(value=a), PufNumber(value=b)):
            return a == b
        case (PufString(value=a), PufString(value=b)):
            return a == b
        case (PufArray(items=items_a), PufArray(items=items_b)):
            if lhs is rhs:
                return True

            key = (id(lhs), id(rhs))
            # a pair already under comparison is assumed equal
            if key in active:
                return True

            if len(items_a) != len(items_b):
                return False

            active.add(key)
            try:
                return all(_equal(a, b, active) for a, b in zip(items_a, items_b))
            finally:
                active.discard(key)
        case (PufStructure(fields=fields_a), PufStructure(fields=fields_b)):
            if lhs is rhs:
                return True

            key = (id(lhs), id(rhs))
            if key in active:
                return True

            if fields_a.keys() != fields_b.keys():
                return False

            active.add(key)
            try:
                return all(_equal(fields_a[k], fields_b[k], active) for k in fields_a)
            finally:
                active.discard(key)
        case (PufClosure(), PufClosure()):
            return lhs == rhs
        case (PufBuiltin(name=a), PufBuiltin(name=b)):
            return a == b
        case _:
            return False


def unexpected_type(value: PufValue) -> PuffinTypeError:
    return PuffinTypeError(display(value))


def as_number(value: PufValue) -> float:
    if isinstance(value, PufNumber):
        return value.value

    raise unexpected_type(value)


def as_string(value: PufValue) -> str:
    if isinstance(value, PufString):
        return value.value

    raise unexpected_type(value)


def as_array(value: PufValue) -> PufArray:
    if isinstance(value, PufArray):
        return value

    raise unexpected_type(value)


def to_index(num: float) -> int:
    """Truncate toward zero and saturate into [0, maxsize]; NaN maps to 0."""
    if math.isnan(num) or num <= 0:
        return 0

    if num >= sys.maxsize:
        return sys.maxsize

    return int(num)


def to_range_bound(num: float) -> int:
    """Truncate toward zero for range initializers; NaN maps to 0."""
    if math.isnan(num):
        return 0

    if math.isinf(num):
        return sys.maxsize if num > 0 else -sys.maxsize - 1

    return int(num)


def truncates_to_zero(num: float) -> bool:
    """True when the number, cast to an integer, is 0 (NaN included)."""
    return math.isnan(num) or -1.0 < num < 1.0


def is_truthy(value: PufValue) -> bool:
    """Truth of a condition: a number whose integer part is non-zero."""
    return not truncates_to_zero(as_number(value))


def is_logically_true(num: float) -> bool:
    return abs(num) > EPSILON


def new_array(items: Optional[List[PufValue]]=None) -> PufArray:
    return PufArray(list(items) if items is not None else [])


def new_structure(fields: Optional[Dict[str, PufValue]]=None) -> PufStructure:
    return PufStructure(dict(fields) if fields is not None else {})


def closure_label(closure: PufClosure) -> str:
    match closure.kind:
        case Named(name=name):
            return name
        case Receiver():
            return "(self)"
        case Anonymous():
            return "λ"
    return "?"
