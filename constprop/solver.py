"""
constprop/solver.py
═══════════════════

Generic forward dataflow framework: the analysis contract, the result
container and an iterative worklist solver.

An analysis plugs in by implementing ``DataflowAnalysis``:

  - ``new_boundary_fact(cfg)``        fact leaving the entry node
  - ``new_initial_fact()``            starting fact everywhere else
  - ``meet_into(fact, target)``       merge ``fact`` into ``target`` in place
  - ``transfer_node(stmt, in, out)``  update ``out``; True if it changed

The solver owns node ordering and convergence.  Facts are mutated in place
and every node owns exactly one IN and one OUT fact for the whole run.

Typical use::

    cfg = load_file("proc.sexp")
    result = WorkListSolver(ConstantPropagation()).solve(cfg)
    result.get_out_fact(stmt)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Dict, Generic, Iterator, Set, Tuple, TypeVar

from constprop.errors import ConvergenceError
from constprop.ir import CFG, Stmt

logger = logging.getLogger(__name__)

F = TypeVar("F")  # Fact type

DEFAULT_MAX_ITERATIONS = 10_000


class DataflowAnalysis(ABC, Generic[F]):
    """
    Abstract base for forward dataflow analyses over a statement CFG.

    Subclasses implement:
      - ``new_boundary_fact(cfg)`` — fact at the CFG entry
      - ``new_initial_fact()``     — fact at every other point
      - ``meet_into(fact, target)`` — confluence, mutating ``target``
      - ``transfer_node(stmt, in_fact, out_fact)`` — returns change flag
    """

    @abstractmethod
    def new_boundary_fact(self, cfg: CFG) -> F:
        ...

    @abstractmethod
    def new_initial_fact(self) -> F:
        ...

    @abstractmethod
    def meet_into(self, fact: F, target: F) -> None:
        ...

    @abstractmethod
    def transfer_node(self, stmt: Stmt, in_fact: F, out_fact: F) -> bool:
        ...


class DataflowResult(Generic[F]):
    """IN and OUT facts of every CFG node after a solver run."""

    def __init__(self) -> None:
        self._in: Dict[Stmt, F] = {}
        self._out: Dict[Stmt, F] = {}

    def get_in_fact(self, stmt: Stmt) -> F:
        return self._in[stmt]

    def get_out_fact(self, stmt: Stmt) -> F:
        return self._out[stmt]

    def set_in_fact(self, stmt: Stmt, fact: F) -> None:
        self._in[stmt] = fact

    def set_out_fact(self, stmt: Stmt, fact: F) -> None:
        self._out[stmt] = fact

    def items(self) -> Iterator[Tuple[Stmt, F, F]]:
        """Yield ``(stmt, in_fact, out_fact)`` in node insertion order."""
        for stmt, out_fact in self._out.items():
            yield stmt, self._in[stmt], out_fact

    def __len__(self) -> int:
        return len(self._out)


class WorkListSolver(Generic[F]):
    """
    Iterative worklist fixpoint solver for forward analyses.

    ``max_iterations`` bounds the number of node visits; a lattice of
    finite height always converges well within it, so hitting the bound
    signals a non-monotone analysis and raises ``ConvergenceError``.
    """

    def __init__(
        self,
        analysis: DataflowAnalysis[F],
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self.analysis = analysis
        self.max_iterations = max_iterations
        self.iterations = 0

    def solve(self, cfg: CFG) -> DataflowResult[F]:
        logger.info("Solving %s with %s", cfg, type(self.analysis).__name__)
        result = self._initialize(cfg)
        self._do_solve(cfg, result)
        logger.info(
            "Fixpoint for %s reached after %d node visit(s)",
            cfg.method, self.iterations,
        )
        return result

    def _initialize(self, cfg: CFG) -> DataflowResult[F]:
        result: DataflowResult[F] = DataflowResult()
        for node in cfg:
            if cfg.is_entry(node):
                result.set_in_fact(node, self.analysis.new_initial_fact())
                result.set_out_fact(node, self.analysis.new_boundary_fact(cfg))
            else:
                result.set_in_fact(node, self.analysis.new_initial_fact())
                result.set_out_fact(node, self.analysis.new_initial_fact())
        return result

    def _do_solve(self, cfg: CFG, result: DataflowResult[F]) -> None:
        worklist: Deque[Stmt] = deque(
            n for n in cfg.reverse_postorder() if not cfg.is_entry(n)
        )
        queued: Set[Stmt] = set(worklist)
        self.iterations = 0

        while worklist:
            if self.iterations >= self.max_iterations:
                raise ConvergenceError(self.max_iterations, len(worklist))
            self.iterations += 1
            node = worklist.popleft()
            queued.discard(node)

            in_fact = result.get_in_fact(node)
            for pred in cfg.preds_of(node):
                self.analysis.meet_into(result.get_out_fact(pred), in_fact)

            if self.analysis.transfer_node(node, in_fact, result.get_out_fact(node)):
                for succ in cfg.succs_of(node):
                    if succ not in queued and not cfg.is_entry(succ):
                        logger.debug("OUT of %s changed; enqueue %s", node, succ)
                        worklist.append(succ)
                        queued.add(succ)


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "DataflowAnalysis",
    "DataflowResult",
    "WorkListSolver",
]
