# tests/conftest.py
"""
Shared helpers and fixtures for the constprop test suite.

Test modules import the builders directly::

    from tests.conftest import int_var, make_chain, assign
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

import pytest

from constprop.analysis import ConstantPropagation
from constprop.fact import CPFact
from constprop.ir import (
    CFG,
    AssignStmt,
    BinaryExp,
    BinaryOp,
    Exp,
    IntLiteral,
    LValue,
    PrimitiveType,
    Stmt,
    Type,
    Var,
)
from constprop.lattice import Value

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


# ── Builders ─────────────────────────────────────────────────────

def var(name: str, type_: Type = PrimitiveType.INT) -> Var:
    return Var(name, type_)


def int_var(name: str) -> Var:
    return Var(name, PrimitiveType.INT)


def lit(n: int) -> IntLiteral:
    return IntLiteral(n)


def binop(op: BinaryOp, left: Exp, right: Exp) -> BinaryExp:
    return BinaryExp(op, left, right)


def assign(lvalue: LValue, rvalue: Exp) -> AssignStmt:
    return AssignStmt(lvalue, rvalue)


def const(n: int) -> Value:
    return Value.make_constant(n)


UNDEF = Value.get_undef()
NAC = Value.get_nac()


def fact_of(**bindings: Value) -> CPFact:
    """Build a fact over int variables: ``fact_of(x=const(1))``."""
    return CPFact({int_var(name): value for name, value in bindings.items()})


def make_chain(stmts: Sequence[Stmt], params: Iterable[Var] = ()) -> CFG:
    """Straight-line CFG: entry → stmts[0] → … → stmts[-1] → exit."""
    cfg = CFG("chain", list(params))
    prev: Stmt = cfg.entry
    for i, stmt in enumerate(stmts):
        stmt.index = i
        cfg.add_edge(prev, stmt)
        prev = stmt
    cfg.add_edge(prev, cfg.exit)
    return cfg


def make_diamond(
    cond: Stmt, left: Stmt, right: Stmt, join: Stmt,
    params: Iterable[Var] = (),
) -> CFG:
    """entry → cond → {left, right} → join → exit."""
    cfg = CFG("diamond", list(params))
    for i, stmt in enumerate((cond, left, right, join)):
        stmt.index = i
    cfg.add_edge(cfg.entry, cond)
    cfg.add_edge(cond, left)
    cfg.add_edge(cond, right)
    cfg.add_edge(left, join)
    cfg.add_edge(right, join)
    cfg.add_edge(join, cfg.exit)
    return cfg


# ── Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def cp() -> ConstantPropagation:
    return ConstantPropagation()


@pytest.fixture
def samples_dir() -> Path:
    return SAMPLES_DIR
