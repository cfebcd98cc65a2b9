"""Built-in host functions and constants registered via puffin.runtime."""

from __future__ import annotations

import logging
import math
import random
import sys
from typing import Callable, List

from .runtime import expect_args, get_one, register_builtin, register_constant
from .types import (
    PufArray,
    PufNull,
    PufNumber,
    PufString,
    PufStructure,
    PufValue,
    PuffinIOError,
    PuffinIndexError,
    PuffinUserError,
)
from .utils import EPSILON, as_array, as_number, display, to_index, unexpected_type

logger = logging.getLogger(__name__)

register_constant("PI", PufNumber(math.pi))
register_constant("EPSILON", PufNumber(EPSILON))
register_constant("true", PufNumber(1.0))
register_constant("false", PufNumber(0.0))

def _render(args: List[PufValue]) -> str:
    return " ".join(display(arg) for arg in args)

# ---------- Conversion / size ----------

@register_builtin("str")
def std_str(_env, args: List[PufValue]) -> PufString:
    return PufString(display(get_one(args)))

@register_builtin("len")
def std_len(_env, args: List[PufValue]) -> PufNumber:
    match get_one(args):
        case PufString(value=s):
            return PufNumber(float(len(s)))
        case PufArray(items=items):
            return PufNumber(float(len(items)))
        case PufStructure(fields=fields):
            return PufNumber(float(len(fields)))
        case other:
            raise unexpected_type(other)

# ---------- I/O ----------

@register_builtin("print")
def std_print(_env, args: List[PufValue]) -> PufNull:
    sys.stdout.write(_render(args) + " ")
    sys.stdout.flush()
    return PufNull()

@register_builtin("println")
def std_println(_env, args: List[PufValue]) -> PufNull:
    sys.stdout.write(_render(args) + "\n")
    return PufNull()

@register_builtin("error")
def std_error(_env, args: List[PufValue]) -> PufValue:
    message = _render(args)
    sys.stderr.write(f"ERR: {message} \n")
    raise PuffinUserError(message or "error() called")

def _read_line(args: List[PufValue]) -> str:
    if args:
        std_print(None, args)
    else:
        sys.stdout.flush()

    try:
        line = sys.stdin.readline()
    except OSError as exc:
        logger.debug("stdin read failed: %s", exc)
        raise PuffinIOError(f"Failed to read input: {exc}") from exc

    if not line:
        raise PuffinIOError("Unexpected end of input")

    return line.rstrip()

@register_builtin("input_str")
def std_input_str(_env, args: List[PufValue]) -> PufString:
    return PufString(_read_line(args))

@register_builtin("input_num")
def std_input_num(_env, args: List[PufValue]) -> PufNumber:
    text = _read_line(args)

    # float() tolerates surrounding whitespace and digit underscores; reject both
    if not text or text != text.lstrip() or "_" in text:
        raise PuffinIOError("Failed to parse number")

    try:
        return PufNumber(float(text))
    except ValueError:
        raise PuffinIOError("Failed to parse number") from None

# ---------- Math ----------

def _float_op(fn: Callable[[float], float]):
    def std_op(_env, args: List[PufValue]) -> PufNumber:
        num = as_number(get_one(args))

        try:
            return PufNumber(fn(num))
        except ValueError:
            # domain errors (sqrt(-1), sin(inf)) are NaN
            return PufNumber(math.nan)

    return std_op

def round_half_away(num: float) -> float:
    if math.isnan(num) or math.isinf(num):
        return num

    whole = math.floor(abs(num))

    if abs(num) - whole >= 0.5:
        whole += 1

    return math.copysign(float(whole), num)

for _name, _fn in (
    ("sin", math.sin),
    ("cos", math.cos),
    ("tan", math.tan),
    ("sqrt", math.sqrt),
    ("abs", abs),
    ("round", round_half_away),
):
    register_builtin(_name)(_float_op(_fn))

def ieee_pow(base: float, exp: float) -> float:
    odd_exp = float(exp).is_integer() and exp % 2 == 1

    try:
        return math.pow(base, exp)
    except ValueError:
        if base == 0:
            # zero to a negative power
            return math.copysign(math.inf, base) if odd_exp else math.inf

        return math.nan
    except OverflowError:
        return -math.inf if base < 0 and odd_exp else math.inf

@register_builtin("pow")
def std_pow(_env, args: List[PufValue]) -> PufNumber:
    expect_args(2, args)
    return PufNumber(ieee_pow(as_number(args[0]), as_number(args[1])))

@register_builtin("rand")
def std_rand(_env, args: List[PufValue]) -> PufNumber:
    expect_args(0, args)
    return PufNumber(random.random())

# ---------- Array mutation ----------

@register_builtin("push")
def std_push(_env, args: List[PufValue]) -> PufArray:
    expect_args(2, args)
    arr = as_array(args[0])
    arr.items.append(args[1])
    return arr

@register_builtin("pop")
def std_pop(_env, args: List[PufValue]) -> PufValue:
    arr = as_array(get_one(args))

    if not arr.items:
        raise PuffinIndexError(0, 0)

    return arr.items.pop()

@register_builtin("remove")
def std_remove(_env, args: List[PufValue]) -> PufValue:
    expect_args(2, args)
    arr = as_array(args[0])
    index = to_index(as_number(args[1]))

    if index >= len(arr.items):
        raise PuffinIndexError(index, len(arr.items))

    return arr.items.pop(index)

@register_builtin("insert")
def std_insert(_env, args: List[PufValue]) -> PufNull:
    expect_args(3, args)
    arr = as_array(args[0])
    index = to_index(as_number(args[1]))

    if index > len(arr.items):
        raise PuffinIndexError(index, len(arr.items))

    arr.items.insert(index, args[2])
    return PufNull()
