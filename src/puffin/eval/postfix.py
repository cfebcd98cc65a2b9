from __future__ import annotations

from typing import Callable, List

from ..nodes import Call, Dot, Exp, PostOp, Subscript
from ..runtime import call_builtin, call_closure
from ..types import (
    Environment,
    PufArray,
    PufBuiltin,
    PufClosure,
    PufString,
    PufStructure,
    PufValue,
    PuffinArityError,
    PuffinIndexError,
    PuffinNameError,
)
from ..utils import as_number, to_index, unexpected_type

EvalFunc = Callable[[Exp, Environment], PufValue]

def apply_postfix(op: PostOp, base: PufValue, env: Environment, eval_func: EvalFunc) -> PufValue:
    match op:
        case Subscript(index=index_exp):
            return eval_subscript(base, index_exp, env, eval_func)
        case Call(args=arg_exps):
            return eval_call(base, arg_exps, env, eval_func)
        case Dot(name=name):
            return eval_dot(base, name)

    raise ValueError(f"Unknown postfix operator {op!r}")

def eval_subscript(base: PufValue, index_exp: Exp, env: Environment, eval_func: EvalFunc) -> PufValue:
    index_value = eval_func(index_exp, env)

    match base:
        case PufArray(items=items):
            index = to_index(as_number(index_value))

            if index >= len(items):
                raise PuffinIndexError(index, len(items))

            return items[index]
        case PufString(value=s):
            index = to_index(as_number(index_value))

            if index >= len(s):
                raise PuffinIndexError(index, len(s))

            return PufString(s[index])
        case _:
            raise unexpected_type(base)

def eval_call(callee: PufValue, arg_exps: List[Exp], env: Environment, eval_func: EvalFunc) -> PufValue:
    """Call `callee`; arguments are evaluated left to right in the caller's frame."""
    match callee:
        case PufClosure(params=params):
            if len(arg_exps) != len(params):
                raise PuffinArityError(len(params), len(arg_exps))

            positional = [eval_func(arg, env) for arg in arg_exps]
            return call_closure(callee, positional)
        case PufBuiltin():
            positional = [eval_func(arg, env) for arg in arg_exps]
            return call_builtin(callee, positional, env)
        case _:
            raise unexpected_type(callee)

def eval_dot(base: PufValue, name: str) -> PufValue:
    if not isinstance(base, PufStructure):
        raise unexpected_type(base)

    try:
        return base.fields[name]
    except KeyError:
        raise PuffinNameError(name) from None
