"""Reorder a flat infix term list into postfix (RPN) evaluation order."""

from __future__ import annotations

from typing import List

from ..nodes import Associativity, Exp, Operator, Term

def _yields_to(top: Operator, incoming: Operator) -> bool:
    """True when `top` must be emitted before `incoming` is pushed."""
    if top.precedence > incoming.precedence:
        return True

    return top.precedence == incoming.precedence and incoming.assoc is Associativity.LEFT

def as_rpn_queue(exp: Exp) -> List[Term]:
    output: List[Term] = []
    stack: List[Operator] = []

    for term in exp.terms:
        if not isinstance(term, Operator):
            output.append(term)
            continue

        while stack and _yields_to(stack[-1], term):
            output.append(stack.pop())

        stack.append(term)

    while stack:
        output.append(stack.pop())

    return output
