"""Lark parse tree -> typed program tree (puffin.nodes)."""

from __future__ import annotations

from typing import Any, List, Optional

from lark import Token, Transformer, Tree
from lark.exceptions import VisitError
from lark.visitors import v_args

from . import lookup
from .nodes import (
    Assign,
    Assignable,
    AssignStep,
    Block,
    Dot,
    Exp,
    ExpStmt,
    FieldStep,
    For,
    ForIn,
    FunctionDef,
    If,
    IfElse,
    IndexStep,
    NameRef,
    NullLit,
    NumLit,
    Operator,
    Paren,
    Program,
    RangeArray,
    Return,
    SizedArray,
    Statement,
    StringLit,
    StructField,
    StructLit,
    Subscript,
    Term,
    While,
)
from .parser import PuffinSyntaxError

class ASTBuildError(PuffinSyntaxError):
    """Parse tree that is grammatical but not a valid program."""

_ESCAPES = {
    '"': '"',
    '\\': '\\',
    'n': '\n',
    't': '\t',
    'r': '\r',
}

def unescape(body: str) -> str:
    out: List[str] = []
    chars = iter(body)

    for ch in chars:
        if ch != '\\':
            out.append(ch)
            continue

        nxt = next(chars, '')
        # unknown escapes are kept as written
        out.append(_ESCAPES.get(nxt, '\\' + nxt))

    return "".join(out)

def _line_col(meta: Any) -> tuple[Optional[int], Optional[int]]:
    if meta is None or getattr(meta, "empty", True):
        return None, None

    return meta.line, meta.column

def to_assignable(exp: Exp, meta: Any=None) -> Assignable:
    """A name followed only by subscripts and field accesses."""
    head, *rest = exp.terms

    if not isinstance(head, NameRef):
        raise ASTBuildError("invalid assignment target", *_line_col(meta))

    steps: List[AssignStep] = []

    for term in rest:
        match term:
            case Operator(kind=Subscript(index=index)):
                steps.append(IndexStep(index))
            case Operator(kind=Dot(name=name)):
                steps.append(FieldStep(name))
            case _:
                raise ASTBuildError("invalid assignment target", *_line_col(meta))

    return Assignable(head.name, steps)

def make_assignment(lhs: Exp, assign_op: str, rhs: Exp, meta: Any=None) -> Assign:
    target = to_assignable(lhs, meta)

    if assign_op == "=":
        return Assign(target, rhs)

    # `lhs op= rhs` reads as `lhs = lhs op (rhs)`
    terms: List[Term] = [*lhs.terms, lookup.compound_infix(assign_op), Paren(rhs)]
    return Assign(target, Exp(terms))

class ASTBuilder(Transformer):
    # ---------- statements ----------

    def start(self, c):
        return Program(list(c))

    def block(self, c):
        return Block(list(c))

    def return_stmt(self, c):
        return Return(c[0])

    def exp_stmt(self, c):
        return ExpStmt(c[0])

    @v_args(meta=True)
    def assign_stmt(self, meta, c):
        lhs, op, rhs = c
        return make_assignment(lhs, op, rhs, meta)

    @v_args(meta=True)
    def simple(self, meta, c):
        if len(c) == 1:
            return ExpStmt(c[0])

        lhs, op, rhs = c
        return make_assignment(lhs, op, rhs, meta)

    def if_stmt(self, c):
        cond, then, *rest = c

        if not rest:
            return If(cond, then)

        or_else = rest[0]

        if not isinstance(or_else, Block):
            # `else if` nests the trailing conditional in its own block
            or_else = Block([or_else])

        return IfElse(cond, then, or_else)

    def while_stmt(self, c):
        cond, block = c
        return While(cond, block)

    def for_stmt(self, c):
        init, cond, advance, block = c
        return For(init, cond, advance, block)

    def for_in_stmt(self, c):
        name, array, block = c
        return ForIn(self._name(name), array, block)

    # ---------- operators ----------

    def assign_op(self, c):
        return "".join(str(tok) for tok in c)

    def infix_op(self, c):
        return lookup.infix("".join(str(tok) for tok in c))

    def unary_op(self, c):
        return lookup.unary(str(c[0]))

    def exp(self, c):
        terms: List[Term] = []

        for item in c:
            # operands arrive as term lists, infix operators bare
            if isinstance(item, list):
                terms.extend(item)
            else:
                terms.append(item)

        return Exp(terms)

    def operand(self, c):
        return list(c)

    def call(self, c):
        return lookup.call(c[0] if c else [])

    def args(self, c):
        return list(c)

    def subscript(self, c):
        return lookup.subscript(c[0])

    def dot(self, c):
        return lookup.dot(self._name(c[0]))

    # ---------- value terms ----------

    def number(self, c):
        return NumLit(float(c[0]))

    def string(self, c):
        return StringLit(unescape(str(c[0])[1:-1]))

    def null(self, _):
        return NullLit()

    def name(self, c):
        return NameRef(self._name(c[0]))

    def paren(self, c):
        return Paren(c[0])

    def sized_array(self, c):
        return SizedArray(c[0])

    def range_array(self, c):
        start, stop = c
        return RangeArray(start, stop)

    def struct(self, c):
        return StructLit(list(c))

    def field(self, c):
        name, exp = c
        return StructField(self._name(name), exp)

    def params(self, c):
        return [self._name(tok) for tok in c]

    def function(self, c):
        params = c[0] if len(c) == 2 else []
        return FunctionDef(params, c[-1])

    def arrow_function(self, c):
        params = c[0] if len(c) == 2 else []
        return FunctionDef(params, Block([Return(c[-1])]))

    @staticmethod
    def _name(tok: Token) -> str:
        name = str(tok)

        if lookup.is_keyword(name):
            raise ASTBuildError(f"'{name}' is a keyword", tok.line, tok.column)

        return name

def _transform(tree: Tree) -> Any:
    try:
        return ASTBuilder().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ASTBuildError):
            raise exc.orig_exc from None

        if isinstance(exc.orig_exc, lookup.UnknownOperator):
            raise ASTBuildError(str(exc.orig_exc)) from None

        raise

def build_program(tree: Tree) -> Program:
    program = _transform(tree)

    if not isinstance(program, Program):
        raise ASTBuildError(f"expected a program, got {type(program).__name__}")

    return program

def build_statements(tree: Tree) -> List[Statement]:
    return build_program(tree).statements
