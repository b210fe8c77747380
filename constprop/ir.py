"""
constprop/ir.py
═══════════════

Minimal three-address IR consumed by the constant propagation analysis.

The analysis only needs to tell apart a handful of shapes, so the IR is
deliberately small:

  Types        PrimitiveType (byte … double), ReferenceType
  Variables    Var(name, type)
  Expressions  Var, IntLiteral, BinaryExp,
               NegExp, InvokeExp, FieldAccess   (never evaluated precisely)
  Statements   AssignStmt (the only definition), Nop, IfStmt, GotoStmt,
               ReturnStmt, InvokeStmt
  Graph        CFG with synthetic entry/exit nodes

Binary operators come in four families (arithmetic, shift, bitwise,
condition).  Each family is its own ``Enum`` whose values are the surface
symbols, so ``lookup_operator("<<")`` gives back ``ShiftOp.SHL``.

Expression nodes are frozen dataclasses.  Statements compare by identity:
two textually equal statements are still two distinct CFG nodes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: TYPES AND VARIABLES
# ═════════════════════════════════════════════════════════════════════════

class PrimitiveType(Enum):
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    CHAR = "char"
    BOOLEAN = "boolean"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ReferenceType:
    name: str

    def __str__(self) -> str:
        return self.name


Type = Union[PrimitiveType, ReferenceType]


def parse_type(name: str) -> Type:
    """Map a type name to a primitive type, or a reference type otherwise."""
    try:
        return PrimitiveType(name)
    except ValueError:
        return ReferenceType(name)


@dataclass(frozen=True, slots=True)
class Var:
    """A local variable or formal parameter of the analysed procedure."""

    name: str
    type: Type

    def __str__(self) -> str:
        return self.name


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: OPERATORS
# ═════════════════════════════════════════════════════════════════════════

class ArithmeticOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"


class ShiftOp(Enum):
    SHL = "<<"
    SHR = ">>"
    USHR = ">>>"


class BitwiseOp(Enum):
    OR = "|"
    AND = "&"
    XOR = "^"


class ConditionOp(Enum):
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


BinaryOp = Union[ArithmeticOp, ShiftOp, BitwiseOp, ConditionOp]

_OPERATORS: Dict[str, BinaryOp] = {
    op.value: op
    for family in (ArithmeticOp, ShiftOp, BitwiseOp, ConditionOp)
    for op in family
}


def lookup_operator(symbol: str) -> Optional[BinaryOp]:
    """Return the operator spelled ``symbol``, or None."""
    return _OPERATORS.get(symbol)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: EXPRESSIONS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class IntLiteral:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class BinaryExp:
    op: BinaryOp
    operand1: Exp
    operand2: Exp

    def __str__(self) -> str:
        return f"{self.operand1} {self.op.value} {self.operand2}"


@dataclass(frozen=True, slots=True)
class NegExp:
    operand: Exp

    def __str__(self) -> str:
        return f"-{self.operand}"


@dataclass(frozen=True, slots=True)
class InvokeExp:
    method: str
    args: Tuple[Exp, ...] = ()

    def __str__(self) -> str:
        return f"{self.method}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True, slots=True)
class FieldAccess:
    base: Var
    field: str

    def __str__(self) -> str:
        return f"{self.base}.{self.field}"


Exp = Union[Var, IntLiteral, BinaryExp, NegExp, InvokeExp, FieldAccess]
LValue = Union[Var, FieldAccess]


# ═════════════════════════════════════════════════════════════════════════
#  PART 4: STATEMENTS
# ═════════════════════════════════════════════════════════════════════════

@dataclass(eq=False)
class Stmt:
    """Base of all statements; ``index`` is the position used for display."""

    index: int = field(default=-1, kw_only=True)


@dataclass(eq=False)
class Nop(Stmt):
    def __str__(self) -> str:
        return "nop"


@dataclass(eq=False)
class AssignStmt(Stmt):
    """``lvalue = rvalue`` — the only statement that defines a value."""

    lvalue: LValue
    rvalue: Exp

    def __str__(self) -> str:
        return f"{self.lvalue} = {self.rvalue}"


@dataclass(eq=False)
class IfStmt(Stmt):
    condition: Exp

    def __str__(self) -> str:
        return f"if ({self.condition})"


@dataclass(eq=False)
class GotoStmt(Stmt):
    def __str__(self) -> str:
        return "goto"


@dataclass(eq=False)
class ReturnStmt(Stmt):
    value: Optional[Exp] = None

    def __str__(self) -> str:
        return "return" if self.value is None else f"return {self.value}"


@dataclass(eq=False)
class InvokeStmt(Stmt):
    invoke: InvokeExp

    def __str__(self) -> str:
        return str(self.invoke)


# ═════════════════════════════════════════════════════════════════════════
#  PART 5: CONTROL-FLOW GRAPH
# ═════════════════════════════════════════════════════════════════════════

class CFG:
    """
    Statement-level control-flow graph of one procedure.

    The entry and exit nodes are synthetic ``Nop`` statements created by
    the graph itself; real statements are added with ``add_node`` and
    connected with ``add_edge``.
    """

    def __init__(self, method: str, params: Sequence[Var] = ()) -> None:
        self.method = method
        self.params: Tuple[Var, ...] = tuple(params)
        self.entry = Nop(index=-1)
        self.exit = Nop(index=-1)
        self._nodes: List[Stmt] = []
        self._succs: Dict[Stmt, List[Stmt]] = {}
        self._preds: Dict[Stmt, List[Stmt]] = {}
        self.add_node(self.entry)
        self.add_node(self.exit)

    def add_node(self, stmt: Stmt) -> Stmt:
        if stmt not in self._succs:
            self._nodes.append(stmt)
            self._succs[stmt] = []
            self._preds[stmt] = []
        return stmt

    def add_edge(self, src: Stmt, dst: Stmt) -> None:
        self.add_node(src)
        self.add_node(dst)
        if dst not in self._succs[src]:
            self._succs[src].append(dst)
            self._preds[dst].append(src)

    def succs_of(self, stmt: Stmt) -> List[Stmt]:
        return self._succs[stmt]

    def preds_of(self, stmt: Stmt) -> List[Stmt]:
        return self._preds[stmt]

    def is_entry(self, stmt: Stmt) -> bool:
        return stmt is self.entry

    def is_exit(self, stmt: Stmt) -> bool:
        return stmt is self.exit

    @property
    def nodes(self) -> List[Stmt]:
        return list(self._nodes)

    def reverse_postorder(self) -> List[Stmt]:
        """Reverse post-order from the entry; unreachable nodes are appended."""
        visited: Set[Stmt] = set()
        order: List[Stmt] = []
        stack: List[Tuple[Stmt, Iterator[Stmt]]] = [
            (self.entry, iter(self._succs[self.entry]))
        ]
        visited.add(self.entry)
        while stack:
            node, succs = stack[-1]
            for succ in succs:
                if succ not in visited:
                    visited.add(succ)
                    stack.append((succ, iter(self._succs[succ])))
                    break
            else:
                stack.pop()
                order.append(node)
        order.reverse()
        order.extend(n for n in self._nodes if n not in visited)
        return order

    def __iter__(self) -> Iterator[Stmt]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, stmt: object) -> bool:
        return stmt in self._succs

    def __repr__(self) -> str:
        edges = sum(len(s) for s in self._succs.values())
        return f"CFG({self.method}: {len(self._nodes)} nodes, {edges} edges)"


__all__ = [
    "PrimitiveType",
    "ReferenceType",
    "Type",
    "parse_type",
    "Var",
    "ArithmeticOp",
    "ShiftOp",
    "BitwiseOp",
    "ConditionOp",
    "BinaryOp",
    "lookup_operator",
    "IntLiteral",
    "BinaryExp",
    "NegExp",
    "InvokeExp",
    "FieldAccess",
    "Exp",
    "LValue",
    "Stmt",
    "Nop",
    "AssignStmt",
    "IfStmt",
    "GotoStmt",
    "ReturnStmt",
    "InvokeStmt",
    "CFG",
]
