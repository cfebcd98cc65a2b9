from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..nodes import Block, Statement
from ..types import Environment, PufValue

# statement runner: a value means an active `return`
StmtFunc = Callable[[Statement, Environment], Optional[PufValue]]

def eval_statements(
    statements: Iterable[Statement],
    env: Environment,
    exec_func: StmtFunc,
) -> Optional[PufValue]:
    """Run statements in order, stopping at the first one that returns."""
    for stmt in statements:
        result = exec_func(stmt, env)

        if result is not None:
            return result

    return None

def eval_block(block: Block, env: Environment, exec_func: StmtFunc) -> Optional[PufValue]:
    # blocks share the enclosing frame
    return eval_statements(block.statements, env, exec_func)
