"""
constprop/analysis.py
═════════════════════

Intraprocedural constant propagation.

  Direction:   FORWARD
  Confluence:  MEET over the flat lattice in ``lattice.py``
  Fact:        CPFact   (Var → Value, absent = UNDEF)
  Transfer:    copy IN to OUT, then kill-and-rebind the target of an
               assignment to an int-like variable

Only variables whose declared type fits in a 32-bit ``int`` are tracked
(byte, short, int, char, boolean).  Everything else never appears in a
fact.

After ``run_constant_propagation(cfg)``, query the returned
``DataflowResult`` with ``get_in_fact(stmt)`` / ``get_out_fact(stmt)``.
"""

from __future__ import annotations

from typing import FrozenSet

from constprop.evaluator import evaluate
from constprop.fact import CPFact
from constprop.ir import CFG, AssignStmt, PrimitiveType, Stmt, Var
from constprop.lattice import Value, meet_value
from constprop.solver import (
    DEFAULT_MAX_ITERATIONS,
    DataflowAnalysis,
    DataflowResult,
    WorkListSolver,
)

_INT_LIKE: FrozenSet[PrimitiveType] = frozenset({
    PrimitiveType.BYTE,
    PrimitiveType.SHORT,
    PrimitiveType.INT,
    PrimitiveType.CHAR,
    PrimitiveType.BOOLEAN,
})


def can_hold_int(var: Var) -> bool:
    """True if ``var`` is declared with a type that fits in an ``int``."""
    return var.type in _INT_LIKE


class ConstantPropagation(DataflowAnalysis[CPFact]):
    """Constant propagation over the UNDEF / #c / NAC lattice."""

    def new_boundary_fact(self, cfg: CFG) -> CPFact:
        # parameters are whatever the caller passed in
        fact = CPFact()
        for param in cfg.params:
            if can_hold_int(param):
                fact.update(param, Value.get_nac())
        return fact

    def new_initial_fact(self) -> CPFact:
        return CPFact()

    def meet_into(self, fact: CPFact, target: CPFact) -> None:
        for key, value in fact.items():
            target.update(key, meet_value(value, target.get(key)))

    def meet_value(self, v1: Value, v2: Value) -> Value:
        return meet_value(v1, v2)

    def transfer_node(self, stmt: Stmt, in_fact: CPFact, out_fact: CPFact) -> bool:
        changed = out_fact.copy_from(in_fact)
        if isinstance(stmt, AssignStmt):
            lvalue = stmt.lvalue
            if isinstance(lvalue, Var) and can_hold_int(lvalue):
                old = out_fact.get(lvalue)
                out_fact.remove(lvalue)
                new = evaluate(stmt.rvalue, in_fact)
                out_fact.update(lvalue, new)
                return old != new or changed
        return changed


def run_constant_propagation(
    cfg: CFG,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> DataflowResult[CPFact]:
    """Run constant propagation over ``cfg`` to a fixpoint."""
    solver = WorkListSolver(ConstantPropagation(), max_iterations=max_iterations)
    return solver.solve(cfg)


__all__ = [
    "can_hold_int",
    "ConstantPropagation",
    "run_constant_propagation",
]
