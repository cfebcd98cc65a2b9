from __future__ import annotations

import importlib
from typing import List

from .types import (
    Anonymous,
    Builtins,
    BuiltinFn,
    ClosureKind,
    Environment,
    Named,
    PufBuiltin,
    PufClosure,
    PufNull,
    PufStructure,
    PufValue,
    PuffinArityError,
    Receiver,
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load the stdlib module (idempotent) so register_builtin hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("puffin.stdlib")
    _STDLIB_INITIALIZED = True

def register_builtin(name: str):
    def dec(fn: BuiltinFn):
        Builtins.values[name] = PufBuiltin(name=name, fn=fn)
        return fn

    return dec

def register_constant(name: str, value: PufValue) -> None:
    Builtins.values[name] = value

def builtin_names() -> List[str]:
    return sorted(Builtins.values)

def expect_args(n: int, args: List[PufValue]) -> None:
    if len(args) != n:
        raise PuffinArityError(n, len(args))

def get_one(args: List[PufValue]) -> PufValue:
    expect_args(1, args)
    return args[0]

def call_closure(fn: PufClosure, positional: List[PufValue]) -> PufValue:
    """Run a closure body in a fresh frame chained to its defining frame."""
    from .evaluator import eval_block  # local import to avoid cycle

    if len(positional) != len(fn.params):
        raise PuffinArityError(len(fn.params), len(positional))

    callee_env = Environment.child_of(fn.env)

    for name, val in zip(fn.params, positional):
        callee_env.bind(name, val)

    match fn.kind:
        case Named(name=name):
            callee_env.bind(name, fn)
        case Receiver(structure=structure):
            callee_env.bind("self", structure)

    result = eval_block(fn.body, callee_env)
    return result if result is not None else PufNull()

def call_builtin(fn: PufBuiltin, args: List[PufValue], env: Environment) -> PufValue:
    return fn.fn(env, args)

def with_kind(fn: PufClosure, kind: ClosureKind, params: List[str] | None=None) -> PufClosure:
    return PufClosure(
        kind=kind,
        params=list(fn.params if params is None else params),
        body=fn.body,
        env=fn.env,
    )

def name_closure(value: PufValue, name: str) -> PufValue:
    """Anonymous closures bound to a name become self-referencing."""
    if isinstance(value, PufClosure) and isinstance(value.kind, Anonymous):
        return with_kind(value, Named(name))

    return value

def bind_receiver(value: PufValue, structure: PufStructure) -> PufValue:
    """Closures whose first parameter is `self` become methods of `structure`."""
    if isinstance(value, PufClosure) and value.params[:1] == ["self"]:
        return with_kind(value, Receiver(structure), params=value.params[1:])

    return value
