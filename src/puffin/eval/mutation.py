from __future__ import annotations

from typing import Callable, List

from ..nodes import Assign, AssignStep, Exp, FieldStep, IndexStep
from ..runtime import name_closure
from ..types import Environment, PufArray, PufNull, PufStructure, PufValue, PuffinIndexError
from ..utils import as_number, new_structure, to_index, unexpected_type

EvalFunc = Callable[[Exp, Environment], PufValue]

def eval_assign(stmt: Assign, env: Environment, eval_func: EvalFunc) -> None:
    lhs = stmt.lhs

    if not lhs.steps:
        value = eval_func(stmt.rhs, env)
        env.bind(lhs.name, name_closure(value, lhs.name))
        return

    # the target must already exist before the right-hand side runs
    current = env.get(lhs.name)
    value = eval_func(stmt.rhs, env)
    env.bind(lhs.name, drill_down(current, lhs.steps, value, env, eval_func))

def drill_down(
    container: PufValue,
    steps: List[AssignStep],
    value: PufValue,
    env: Environment,
    eval_func: EvalFunc,
) -> PufValue:
    """Return `container` with the element addressed by `steps` replaced by `value`.

    Arrays and structures are updated in place, so every alias observes the
    write. The element being descended into is taken out of its container
    until the nested write returns. A missing structure field along the path
    starts out as an empty structure.
    """
    if not steps:
        return value

    step, rest = steps[0], steps[1:]

    match (container, step):
        case (PufArray(items=items), IndexStep(index=index_exp)):
            index = to_index(as_number(eval_func(index_exp, env)))

            if index >= len(items):
                raise PuffinIndexError(index, len(items))

            # slot holds null while the nested write runs
            inner, items[index] = items[index], PufNull()
            items[index] = drill_down(inner, rest, value, env, eval_func)
            return container
        case (PufStructure(fields=fields), FieldStep(name=name)):
            inner = fields.pop(name, None)

            if inner is None:
                inner = new_structure()

            fields[name] = drill_down(inner, rest, value, env, eval_func)
            return container
        case _:
            raise unexpected_type(container)
