from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set, Union
from typing_extensions import TypeAlias
from .nodes import Block

# ---------- Value Model ----------

@dataclass
class PufNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class PufNumber:
    value: float
    def __repr__(self) -> str:
        from .utils import display
        return display(self)

@dataclass
class PufString:
    value: str
    def __repr__(self) -> str:
        return f"'{self.value}'"

@dataclass(eq=False)
class PufArray:
    """Shared, mutable sequence; every alias sees in-place changes."""
    items: List['PufValue'] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        from .utils import values_equal
        return isinstance(other, PufArray) and values_equal(self, other)

    def __repr__(self) -> str:
        from .utils import display
        return display(self)

@dataclass(eq=False)
class PufStructure:
    """Shared, mutable field mapping; also the receiver for `self` methods."""
    fields: Dict[str, 'PufValue'] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        from .utils import values_equal
        return isinstance(other, PufStructure) and values_equal(self, other)

    def __repr__(self) -> str:
        from .utils import display
        return display(self)

# ---------- Closures ----------

@dataclass
class Anonymous:
    pass

@dataclass
class Named:
    name: str

@dataclass(eq=False)
class Receiver:
    structure: PufStructure

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Receiver) and other.structure is self.structure

ClosureKind: TypeAlias = Union[Anonymous, Named, Receiver]

@dataclass(eq=False)
class PufClosure:
    kind: ClosureKind
    params: List[str]     # excludes an implicit `self`
    body: Block
    env: 'Environment'    # defining frame, not the caller's

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PufClosure):
            return False

        return (
            self.kind == other.kind
            and self.params == other.params
            and self.body == other.body
            and self.env is other.env
        )

    def __repr__(self) -> str:
        from .utils import display
        return display(self)

BuiltinFn = Callable[['Environment', List['PufValue']], 'PufValue']

@dataclass(eq=False)
class PufBuiltin:
    name: str
    fn: BuiltinFn

    # builtin names are unique, so the name is the identity
    def __eq__(self, other: object) -> bool:
        return isinstance(other, PufBuiltin) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"<Builtin Function: {self.name}>"

PufValue: TypeAlias = (
    PufNull
    | PufNumber
    | PufString
    | PufArray
    | PufStructure
    | PufClosure
    | PufBuiltin
)

# ---------- Environment ----------

class Environment:
    """One frame of the lexical scope chain.

    Only the root frame holds builtins; only closure calls push new frames.
    """

    def __init__(self, parent: Optional['Environment']=None):
        self.parent = parent
        self.vars: Dict[str, PufValue] = {}
        self.builtins: Set[str] = set()

    @classmethod
    def new(cls) -> 'Environment':
        root = cls()

        for name, value in Builtins.values.items():
            root.vars[name] = value

        root.builtins = set(Builtins.values)
        return root

    @classmethod
    def child_of(cls, parent: 'Environment') -> 'Environment':
        return cls(parent=parent)

    def is_root(self) -> bool:
        return self.parent is None

    def bind(self, name: str, val: PufValue) -> None:
        if name in self.builtins:
            raise PuffinRebindError(name)

        self.vars[name] = val

    def get(self, name: str) -> PufValue:
        frame: Optional[Environment] = self

        while frame is not None:
            if name in frame.vars:
                return frame.vars[name]
            frame = frame.parent

        raise PuffinNameError(name)

    def __repr__(self) -> str:
        kind = "root" if self.is_root() else "frame"
        return f"<{kind} names={sorted(self.vars)}>"

# ---------- Exceptions ----------

class PuffinRuntimeError(Exception):
    """Base of every recoverable evaluation error."""

class PuffinNameError(PuffinRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Name '{name}' is not bound")
        self.name = name

class PuffinArityError(PuffinRuntimeError):
    def __init__(self, expected: int, got: int):
        super().__init__(f"Expected {expected} argument(s); got {got}")
        self.expected = expected
        self.got = got

class PuffinTypeError(PuffinRuntimeError):
    def __init__(self, description: str):
        super().__init__(f"Unexpected type: {description}")
        self.description = description

class PuffinRebindError(PuffinRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Cannot rebind builtin '{name}'")
        self.name = name

class PuffinIndexError(PuffinRuntimeError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Index {index} out of bounds for size {size}")
        self.index = index
        self.size = size

class PuffinRangeError(PuffinRuntimeError):
    def __init__(self, start: int, stop: int):
        super().__init__(f"Invalid range [{start}:{stop}]")
        self.start = start
        self.stop = stop

class PuffinIOError(PuffinRuntimeError):
    pass

class PuffinUserError(PuffinRuntimeError):
    def __init__(self, message: str = "error() called"):
        super().__init__(message)

# ---------- Builtin registry ----------

class Builtins:
    values: Dict[str, PufValue] = {}
