"""
constprop — Intraprocedural Constant Propagation
================================================

Forward dataflow analysis that determines, at every program point, which
``int``-like variables provably hold a single 32-bit constant.

Core modules
------------
lattice
    The UNDEF / #c / NAC value lattice and its meet.
fact
    ``CPFact``: variable → value map with change reporting.
ir
    Minimal IR: types, variables, expressions, statements, CFG.
evaluator
    Abstract evaluation of expressions with 32-bit folding.
analysis
    ``ConstantPropagation`` transfer/meet/boundary functions.
solver
    Generic worklist fixpoint solver and result container.
sexp_reader
    Loader for procedures written as S-expressions.

Quick start
-----------
>>> from constprop import load_procedure, run_constant_propagation
>>> cfg = load_procedure('''
... (procedure f (vars (x int) (y int))
...   (node 0 (assign x 1) 1)
...   (node 1 (assign y (+ x 2))))
... ''')
>>> result = run_constant_propagation(cfg)
>>> result.get_in_fact(cfg.exit)
{x=#1, y=#3}
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import TYPE_CHECKING, List

__version__ = "0.1.0"
__all__: List[str] = []          # populated below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Registry: (module_name, names to re-export)
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "errors": [
        "ConstPropError",
        "LatticeError",
        "IRLoadError",
        "ConvergenceError",
    ],
    "lattice": [
        "Value",
        "Kind",
        "meet_value",
        "wrap_int32",
    ],
    "ir": [
        "PrimitiveType",
        "ReferenceType",
        "Var",
        "IntLiteral",
        "BinaryExp",
        "ArithmeticOp",
        "ShiftOp",
        "BitwiseOp",
        "ConditionOp",
        "AssignStmt",
        "CFG",
    ],
    "fact": [
        "CPFact",
    ],
    "evaluator": [
        "evaluate",
    ],
    "solver": [
        "DataflowAnalysis",
        "DataflowResult",
        "WorkListSolver",
    ],
    "analysis": [
        "ConstantPropagation",
        "can_hold_int",
        "run_constant_propagation",
    ],
    "sexp_reader": [
        "load_procedure",
        "load_file",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        raise ImportError(
            f"constprop: submodule '{module_rel_name}' failed to import: {exc}"
        ) from exc

    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            raise AttributeError(f"constprop.{module_rel_name} does not export '{name}'")
        setattr(current_module, name, obj)
        __all__.append(name)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)
    _log.debug("Re-exported %d name(s) from %s", len(names), fq_name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names)

del _mod, _names


def list_submodules() -> List[str]:
    """Return the names of all re-exported submodules."""
    return sorted(_CORE_MODULES)


__all__ += ["list_submodules", "__version__"]


if TYPE_CHECKING:
    from .errors import (
        ConstPropError as ConstPropError,
        LatticeError as LatticeError,
        IRLoadError as IRLoadError,
        ConvergenceError as ConvergenceError,
    )
    from .lattice import (
        Value as Value,
        Kind as Kind,
        meet_value as meet_value,
        wrap_int32 as wrap_int32,
    )
    from .ir import (
        PrimitiveType as PrimitiveType,
        ReferenceType as ReferenceType,
        Var as Var,
        IntLiteral as IntLiteral,
        BinaryExp as BinaryExp,
        ArithmeticOp as ArithmeticOp,
        ShiftOp as ShiftOp,
        BitwiseOp as BitwiseOp,
        ConditionOp as ConditionOp,
        AssignStmt as AssignStmt,
        CFG as CFG,
    )
    from .fact import CPFact as CPFact
    from .evaluator import evaluate as evaluate
    from .solver import (
        DataflowAnalysis as DataflowAnalysis,
        DataflowResult as DataflowResult,
        WorkListSolver as WorkListSolver,
    )
    from .analysis import (
        ConstantPropagation as ConstantPropagation,
        can_hold_int as can_hold_int,
        run_constant_propagation as run_constant_propagation,
    )
    from .sexp_reader import (
        load_procedure as load_procedure,
        load_file as load_file,
    )
