from __future__ import annotations

from typing import Callable

from ..nodes import (
    Exp,
    FunctionDef,
    NameRef,
    NullLit,
    NumLit,
    Paren,
    RangeArray,
    SizedArray,
    StringLit,
    StructLit,
    ValueTerm,
)
from ..runtime import bind_receiver
from ..types import (
    Anonymous,
    Environment,
    PufArray,
    PufClosure,
    PufNull,
    PufNumber,
    PufString,
    PufStructure,
    PufValue,
    PuffinRangeError,
)
from ..utils import as_number, new_array, new_structure, to_index, to_range_bound

EvalFunc = Callable[[Exp, Environment], PufValue]

def eval_value_term(term: ValueTerm, env: Environment, eval_func: EvalFunc) -> PufValue:
    match term:
        case NumLit(value=num):
            return PufNumber(num)
        case StringLit(value=s):
            return PufString(s)
        case NullLit():
            return PufNull()
        case NameRef(name=name):
            return env.get(name)
        case Paren(exp=inner):
            return eval_func(inner, env)
        case StructLit():
            return eval_struct_literal(term, env, eval_func)
        case FunctionDef(params=params, block=block):
            # captures the defining frame, not a copy of it
            return PufClosure(kind=Anonymous(), params=list(params), body=block, env=env)
        case SizedArray(size=size_exp):
            return eval_sized_array(size_exp, env, eval_func)
        case RangeArray(start=start_exp, stop=stop_exp):
            return eval_range_array(start_exp, stop_exp, env, eval_func)

    raise ValueError(f"Unknown value term {term!r}")

def eval_struct_literal(lit: StructLit, env: Environment, eval_func: EvalFunc) -> PufStructure:
    """Fields evaluate in source order; `self`-first closures bind to the new structure."""
    structure = new_structure()

    for field in lit.fields:
        value = eval_func(field.exp, env)
        structure.fields[field.name] = bind_receiver(value, structure)

    return structure

def eval_sized_array(size_exp: Exp, env: Environment, eval_func: EvalFunc) -> PufArray:
    size = to_index(as_number(eval_func(size_exp, env)))
    return new_array([PufNull() for _ in range(size)])

def eval_range_array(start_exp: Exp, stop_exp: Exp, env: Environment, eval_func: EvalFunc) -> PufArray:
    start = to_range_bound(as_number(eval_func(start_exp, env)))
    stop = to_range_bound(as_number(eval_func(stop_exp, env)))

    if start > stop:
        raise PuffinRangeError(start, stop)

    return new_array([PufNumber(float(i)) for i in range(start, stop)])
