"""
constprop/errors.py
═══════════════════

Exception hierarchy for the constant propagation package.

    ConstPropError
    ├── LatticeError       — misuse of a lattice value (caller bug)
    ├── IRLoadError        — malformed procedure text
    └── ConvergenceError   — solver iteration bound exhausted

The analysis core itself only ever raises ``LatticeError``, and only when
a caller breaks a contract (e.g. asking a NAC value for its constant).
"""

from __future__ import annotations

from typing import Any, Optional


class ConstPropError(Exception):
    """Base class for every error raised by ``constprop``."""


class LatticeError(ConstPropError, ValueError):
    """A lattice value was used outside its contract."""


class IRLoadError(ConstPropError, ValueError):
    """Raised when procedure text cannot be mapped to IR."""

    def __init__(self, message: str, form: Optional[Any] = None) -> None:
        self.message = message
        self.form = form
        super().__init__(message)

    def __str__(self) -> str:
        if self.form is not None:
            return f"{self.message} (in {self.form!r})"
        return self.message


class ConvergenceError(ConstPropError, RuntimeError):
    """The worklist solver did not reach a fixpoint within its bound."""

    def __init__(self, max_iterations: int, pending: int) -> None:
        self.max_iterations = max_iterations
        self.pending = pending
        super().__init__(
            f"Dataflow analysis did not converge in {max_iterations} "
            f"iterations ({pending} node(s) still pending)"
        )


__all__ = [
    "ConstPropError",
    "LatticeError",
    "IRLoadError",
    "ConvergenceError",
]
