"""
constprop/lattice.py
════════════════════

The three-level value lattice for constant propagation.

            NAC
        / | | | \\
      …  -1  0  1  …
        \\ | | | /
           UNDEF

  UNDEF        no information yet (bottom, analysis-start value)
  #c           provably the 32-bit integer c
  NAC          not a constant (top)

Height = 2: a value can move UNDEF → #c → NAC and nowhere else, which
bounds the number of changes any fact can undergo during a fixpoint run.

Constants are normalised to signed 32-bit two's complement on
construction, so every value stored here matches what a native ``int``
register would hold.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Final

from constprop.errors import LatticeError

INT_BITS: Final[int] = 32
INT_MIN: Final[int] = -(1 << (INT_BITS - 1))
INT_MAX: Final[int] = (1 << (INT_BITS - 1)) - 1
_MASK: Final[int] = (1 << INT_BITS) - 1


def wrap_int32(n: int) -> int:
    """Reduce an unbounded Python int to signed 32-bit two's complement."""
    n &= _MASK
    if n > INT_MAX:
        n -= 1 << INT_BITS
    return n


class Kind(Enum):
    UNDEF = auto()
    CONSTANT = auto()
    NAC = auto()


@dataclass(frozen=True, slots=True)
class Value:
    """
    An abstract integer value: UNDEF, a constant, or NAC.

    Values are immutable and compare structurally.  Prefer the factory
    methods over the constructor; the constructor normalises anyway.

    Examples
    --------
    >>> Value.make_constant(7)
    #7
    >>> Value.make_constant(2**31)
    #-2147483648
    >>> meet_value(Value.make_constant(1), Value.make_constant(2))
    NAC
    """
    kind: Kind
    constant: int = 0

    _UNDEF: ClassVar[Value]
    _NAC: ClassVar[Value]

    def __post_init__(self) -> None:
        if self.kind is Kind.CONSTANT:
            object.__setattr__(self, "constant", wrap_int32(self.constant))
        elif self.constant != 0:
            object.__setattr__(self, "constant", 0)

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def get_undef(cls) -> Value:
        return cls._UNDEF

    @classmethod
    def get_nac(cls) -> Value:
        return cls._NAC

    @classmethod
    def make_constant(cls, c: int) -> Value:
        return cls(Kind.CONSTANT, c)

    # ---- Variant tests ---------------------------------------------------

    def is_undef(self) -> bool:
        return self.kind is Kind.UNDEF

    def is_constant(self) -> bool:
        return self.kind is Kind.CONSTANT

    def is_nac(self) -> bool:
        return self.kind is Kind.NAC

    def get_constant(self) -> int:
        """Return the held integer.  Only valid for constant values."""
        if self.kind is not Kind.CONSTANT:
            raise LatticeError(f"{self} is not a constant")
        return self.constant

    # ---- Order -----------------------------------------------------------

    def leq(self, other: Value) -> bool:
        """UNDEF ⊑ anything;  x ⊑ NAC;  #c ⊑ #c."""
        if self.is_undef() or other.is_nac():
            return True
        return self == other

    def __repr__(self) -> str:
        if self.kind is Kind.UNDEF:
            return "UNDEF"
        if self.kind is Kind.NAC:
            return "NAC"
        return f"#{self.constant}"

    __str__ = __repr__


Value._UNDEF = Value(Kind.UNDEF)
Value._NAC = Value(Kind.NAC)


def meet_value(v1: Value, v2: Value) -> Value:
    """
    Combine two values flowing into the same program point.

    NAC absorbs, UNDEF is the identity, equal constants survive and
    unequal constants collapse to NAC.
    """
    if v1.is_constant() and v2.is_constant():
        if v1 == v2:
            return v1
        return Value.get_nac()
    if v1.is_nac() or v2.is_nac():
        return Value.get_nac()
    if v1.is_constant():
        return v1
    if v2.is_constant():
        return v2
    return Value.get_undef()


__all__ = [
    "INT_BITS",
    "INT_MIN",
    "INT_MAX",
    "wrap_int32",
    "Kind",
    "Value",
    "meet_value",
]
