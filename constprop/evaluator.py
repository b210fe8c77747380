"""
constprop/evaluator.py
══════════════════════

Abstract evaluation of IR expressions against a ``CPFact``.

Concrete folding follows 32-bit ``int`` semantics: results wrap on
overflow, division and remainder truncate toward zero, and shift
distances are taken modulo 32 (only the low five bits count).

Expression shapes other than variables, integer literals and binary
expressions evaluate to NAC.
"""

from __future__ import annotations

import operator as op
from typing import Callable, Dict

from constprop.fact import CPFact
from constprop.ir import (
    ArithmeticOp,
    BinaryExp,
    BinaryOp,
    BitwiseOp,
    ConditionOp,
    Exp,
    IntLiteral,
    ShiftOp,
    Var,
)
from constprop.lattice import INT_BITS, Value, wrap_int32

_SHIFT_MASK = INT_BITS - 1
_UNSIGNED_MASK = (1 << INT_BITS) - 1


def _div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _rem(a: int, b: int) -> int:
    return a - b * _div(a, b)


def _shl(a: int, b: int) -> int:
    return a << (b & _SHIFT_MASK)


def _shr(a: int, b: int) -> int:
    return a >> (b & _SHIFT_MASK)


def _ushr(a: int, b: int) -> int:
    return (a & _UNSIGNED_MASK) >> (b & _SHIFT_MASK)


def _cond(f: Callable[[int, int], bool]) -> Callable[[int, int], int]:
    return lambda a, b: 1 if f(a, b) else 0


_FOLD: Dict[BinaryOp, Callable[[int, int], int]] = {
    ArithmeticOp.ADD: op.add,
    ArithmeticOp.SUB: op.sub,
    ArithmeticOp.MUL: op.mul,
    ArithmeticOp.DIV: _div,
    ArithmeticOp.REM: _rem,
    ShiftOp.SHL: _shl,
    ShiftOp.SHR: _shr,
    ShiftOp.USHR: _ushr,
    BitwiseOp.OR: op.or_,
    BitwiseOp.AND: op.and_,
    BitwiseOp.XOR: op.xor,
    ConditionOp.EQ: _cond(op.eq),
    ConditionOp.NE: _cond(op.ne),
    ConditionOp.LT: _cond(op.lt),
    ConditionOp.GT: _cond(op.gt),
    ConditionOp.LE: _cond(op.le),
    ConditionOp.GE: _cond(op.ge),
}


def fold(operator: BinaryOp, int1: int, int2: int) -> int:
    """
    Apply ``operator`` to two 32-bit operands and wrap the result.

    Division and remainder by zero are the caller's problem; ``evaluate``
    never gets here with a zero divisor.
    """
    return wrap_int32(_FOLD[operator](int1, int2))


def evaluate(exp: Exp, in_fact: CPFact) -> Value:
    """Return the abstract value of ``exp`` given the facts in ``in_fact``."""
    if isinstance(exp, Var):
        return in_fact.get(exp)

    if isinstance(exp, IntLiteral):
        return Value.make_constant(exp.value)

    if isinstance(exp, BinaryExp):
        v1 = evaluate(exp.operand1, in_fact)
        v2 = evaluate(exp.operand2, in_fact)
        operator = exp.op

        # x / 0 and x % 0 carry no information, whatever x is
        if (
            operator in (ArithmeticOp.DIV, ArithmeticOp.REM)
            and v2.is_constant()
            and v2.get_constant() == 0
        ):
            return Value.get_undef()
        if v1.is_nac() or v2.is_nac():
            return Value.get_nac()
        if v1.is_undef() or v2.is_undef():
            return Value.get_undef()
        return Value.make_constant(
            fold(operator, v1.get_constant(), v2.get_constant())
        )

    return Value.get_nac()


__all__ = ["fold", "evaluate"]
