from __future__ import annotations

import logging
from typing import List, Optional

from .nodes import (
    Assign,
    Block,
    Call,
    Dot,
    Exp,
    ExpStmt,
    For,
    ForIn,
    If,
    IfElse,
    Infix,
    Operator,
    Program,
    Return,
    Statement,
    Subscript,
    Unary,
    While,
)
from .runtime import builtin_names, init_stdlib
from .types import Environment, PufNull, PufValue

from .eval.blocks import eval_block as _eval_block, eval_statements
from .eval.expr import apply_infix, apply_unary
from .eval.literals import eval_value_term
from .eval.loops import eval_for, eval_for_in, eval_if, eval_if_else, eval_while
from .eval.mutation import eval_assign
from .eval.postfix import apply_postfix
from .eval.shunting_yard import as_rpn_queue

logger = logging.getLogger(__name__)

# ---------------- Public API ----------------

def new_environment() -> Environment:
    """Root environment seeded with every builtin and constant."""
    init_stdlib()
    logger.debug("seeding root environment with %d builtins", len(builtin_names()))
    return Environment.new()

def eval_program(program: Program, env: Optional[Environment]=None) -> PufValue:
    """Run a whole program; the value of the first top-level `return`, else null."""
    if env is None:
        env = new_environment()

    logger.debug("evaluating program with %d statement(s)", len(program.statements))
    result = eval_statements(program.statements, env, exec_statement)
    return result if result is not None else PufNull()

def eval_block(block: Block, env: Environment) -> Optional[PufValue]:
    return _eval_block(block, env, exec_statement)

class ReplSession:
    """Interactive evaluation: one environment that survives across inputs."""

    def __init__(self) -> None:
        self.env = new_environment()
        logger.debug("repl session started")

    def reset(self) -> None:
        self.env = new_environment()
        logger.debug("repl session reset")

    def eval_statement(self, stmt: Statement) -> Optional[PufValue]:
        """Like program evaluation, but a bare expression's value is surfaced."""
        if isinstance(stmt, ExpStmt):
            return eval_exp(stmt.exp, self.env)

        return exec_statement(stmt, self.env)

    def eval_statements(self, statements: List[Statement]) -> PufValue:
        result: Optional[PufValue] = None

        for stmt in statements:
            result = self.eval_statement(stmt)

        return result if result is not None else PufNull()

# ---------------- Core evaluator ----------------

def exec_statement(stmt: Statement, env: Environment) -> Optional[PufValue]:
    """Run one statement; a value means a `return` is propagating."""
    match stmt:
        case Return(exp=exp):
            return eval_exp(exp, env)
        case ExpStmt(exp=exp):
            eval_exp(exp, env)
            return None
        case Assign():
            eval_assign(stmt, env, eval_exp)
            return None
        case If():
            return eval_if(stmt, env, eval_exp, exec_statement)
        case IfElse():
            return eval_if_else(stmt, env, eval_exp, exec_statement)
        case While():
            return eval_while(stmt, env, eval_exp, exec_statement)
        case For():
            return eval_for(stmt, env, eval_exp, exec_statement)
        case ForIn():
            return eval_for_in(stmt, env, eval_exp, exec_statement)

    raise ValueError(f"Unknown statement {stmt!r}")

def eval_exp(exp: Exp, env: Environment) -> PufValue:
    stack: List[PufValue] = []

    for term in as_rpn_queue(exp):
        if not isinstance(term, Operator):
            stack.append(eval_value_term(term, env, eval_exp))
            continue

        match term.kind:
            case Unary(op=op):
                stack.append(apply_unary(op, stack.pop()))
            case Infix(op=op):
                rhs = stack.pop()
                lhs = stack.pop()
                stack.append(apply_infix(op, lhs, rhs))
            case Call() | Subscript() | Dot():
                base = stack.pop()
                stack.append(apply_postfix(term.kind, base, env, eval_exp))

    if len(stack) != 1:
        raise RuntimeError(f"malformed expression: {len(stack)} values left on the stack")

    return stack[0]
