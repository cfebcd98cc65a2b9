from __future__ import annotations

from typing import Callable, Optional

from ..nodes import Exp, For, ForIn, If, IfElse, While
from ..types import Environment, PufArray, PufValue
from ..utils import is_truthy, unexpected_type
from .blocks import StmtFunc, eval_block

EvalFunc = Callable[[Exp, Environment], PufValue]

def eval_if(stmt: If, env: Environment, eval_func: EvalFunc, exec_func: StmtFunc) -> Optional[PufValue]:
    if is_truthy(eval_func(stmt.cond, env)):
        return eval_block(stmt.then, env, exec_func)

    return None

def eval_if_else(stmt: IfElse, env: Environment, eval_func: EvalFunc, exec_func: StmtFunc) -> Optional[PufValue]:
    branch = stmt.then if is_truthy(eval_func(stmt.cond, env)) else stmt.or_else
    return eval_block(branch, env, exec_func)

def eval_while(stmt: While, env: Environment, eval_func: EvalFunc, exec_func: StmtFunc) -> Optional[PufValue]:
    while is_truthy(eval_func(stmt.cond, env)):
        result = eval_block(stmt.block, env, exec_func)

        if result is not None:
            return result

    return None

def eval_for(stmt: For, env: Environment, eval_func: EvalFunc, exec_func: StmtFunc) -> Optional[PufValue]:
    """C-style loop; `advance` runs after each body that did not return."""
    result = exec_func(stmt.init, env)

    if result is not None:
        return result

    while is_truthy(eval_func(stmt.cond, env)):
        result = eval_block(stmt.block, env, exec_func)

        if result is not None:
            return result

        result = exec_func(stmt.advance, env)

        if result is not None:
            return result

    return None

def eval_for_in(stmt: ForIn, env: Environment, eval_func: EvalFunc, exec_func: StmtFunc) -> Optional[PufValue]:
    array = eval_func(stmt.array, env)

    if not isinstance(array, PufArray):
        raise unexpected_type(array)

    index = 0

    # length is re-read each pass; the body may grow or shrink the array
    while index < len(array.items):
        env.bind(stmt.name, array.items[index])
        result = eval_block(stmt.block, env, exec_func)

        if result is not None:
            return result

        index += 1

    return None
