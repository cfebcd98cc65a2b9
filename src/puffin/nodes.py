"""Typed program tree consumed by the evaluator.

The AST builder produces these nodes from the lark parse tree; the evaluator
only ever reads them. Expressions are kept flat (a list of terms) and are put
into evaluation order at run time by the shunting-yard pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union
from typing_extensions import TypeAlias

# ---------- Operators ----------

class Associativity(Enum):
    LEFT = "left"
    RIGHT = "right"

class Unop(Enum):
    NOT = "!"
    NEG = "-"

class InfixOp(Enum):
    MUL = "*"
    MOD = "%"
    DIV = "/"
    PLUS = "+"
    MINUS = "-"
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NE = "!="
    AND = "&&"
    OR = "||"

@dataclass
class Unary:
    op: Unop

@dataclass
class Infix:
    op: InfixOp

@dataclass
class Call:
    args: List['Exp']

@dataclass
class Subscript:
    index: 'Exp'

@dataclass
class Dot:
    name: str

PostOp: TypeAlias = Union[Call, Subscript, Dot]
OperatorKind: TypeAlias = Union[Unary, Infix, PostOp]

@dataclass
class Operator:
    kind: OperatorKind
    assoc: Associativity
    precedence: int

# ---------- Value terms ----------

@dataclass
class NumLit:
    value: float

@dataclass
class StringLit:
    value: str

@dataclass
class NullLit:
    pass

@dataclass
class NameRef:
    name: str

@dataclass
class Paren:
    exp: 'Exp'

@dataclass
class StructField:
    name: str
    exp: 'Exp'

@dataclass
class StructLit:
    fields: List[StructField]

@dataclass
class FunctionDef:
    params: List[str]
    block: 'Block'

@dataclass
class SizedArray:
    size: 'Exp'

@dataclass
class RangeArray:
    start: 'Exp'
    stop: 'Exp'

ValueTerm: TypeAlias = Union[
    NumLit, StringLit, NullLit, NameRef, Paren, StructLit, FunctionDef, SizedArray, RangeArray
]
Term: TypeAlias = Union[Operator, ValueTerm]

@dataclass
class Exp:
    terms: List[Term]

# ---------- Assignment targets ----------

@dataclass
class IndexStep:
    index: Exp

@dataclass
class FieldStep:
    name: str

AssignStep: TypeAlias = Union[IndexStep, FieldStep]

@dataclass
class Assignable:
    name: str
    steps: List[AssignStep] = field(default_factory=list)

# ---------- Statements ----------

@dataclass
class Block:
    statements: List['Statement'] = field(default_factory=list)

@dataclass
class Return:
    exp: Exp

@dataclass
class Assign:
    lhs: Assignable
    rhs: Exp

@dataclass
class ExpStmt:
    exp: Exp

@dataclass
class If:
    cond: Exp
    then: Block

@dataclass
class IfElse:
    cond: Exp
    then: Block
    or_else: Block

@dataclass
class While:
    cond: Exp
    block: Block

@dataclass
class For:
    init: 'Statement'
    cond: Exp
    advance: 'Statement'
    block: Block

@dataclass
class ForIn:
    name: str
    array: Exp
    block: Block

Conditional: TypeAlias = Union[If, IfElse]
Loop: TypeAlias = Union[While, For, ForIn]
Nest: TypeAlias = Union[Conditional, Loop]
Statement: TypeAlias = Union[Return, Assign, ExpStmt, Nest]

@dataclass
class Program:
    statements: List[Statement] = field(default_factory=list)
