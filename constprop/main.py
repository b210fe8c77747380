#!/usr/bin/env python3
"""constprop/main.py — command-line front end.

Usage examples
--------------
    # Print the IN/OUT facts of every node
    python -m constprop examples/branch_merge.sexp

    # Machine-readable output, with solver progress on stderr
    python -m constprop examples/branch_merge.sexp --format json -v

Exit codes
----------
    0   Success.
    2   Infrastructure failure (missing file, malformed procedure,
        solver did not converge).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO

from constprop import __version__
from constprop.analysis import run_constant_propagation
from constprop.errors import ConvergenceError, IRLoadError
from constprop.fact import CPFact
from constprop.ir import CFG, Stmt
from constprop.sexp_reader import load_file
from constprop.solver import DEFAULT_MAX_ITERATIONS, DataflowResult

_log = logging.getLogger("constprop")

EXIT_OK: int = 0
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``constprop`` logger.

    0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("constprop")
    root.setLevel(level)
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(handler)


def _label(cfg: CFG, stmt: Stmt) -> str:
    if cfg.is_entry(stmt):
        return "[entry]"
    if cfg.is_exit(stmt):
        return "[exit]"
    return str(stmt)


def _fact_to_dict(fact: CPFact) -> Dict[str, str]:
    return {
        var.name: str(value)
        for var, value in sorted(fact.items(), key=lambda kv: kv[0].name)
    }


def _emit_text(cfg: CFG, result: DataflowResult, stream: TextIO) -> None:
    stream.write(f"procedure {cfg.method}\n")
    for stmt, in_fact, out_fact in result.items():
        stream.write(f"{stmt.index:>4}  {_label(cfg, stmt):<30} IN {in_fact}  OUT {out_fact}\n")


def _emit_json(cfg: CFG, result: DataflowResult, stream: TextIO) -> None:
    rows: List[Dict[str, Any]] = [
        {
            "index": stmt.index,
            "stmt": _label(cfg, stmt),
            "in": _fact_to_dict(in_fact),
            "out": _fact_to_dict(out_fact),
        }
        for stmt, in_fact, out_fact in result.items()
    ]
    json.dump({"procedure": cfg.method, "nodes": rows}, stream, indent=2)
    stream.write("\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="constprop",
        description="Run constant propagation over a procedure CFG.",
    )
    parser.add_argument("file", help="procedure in S-expression form")
    parser.add_argument(
        "--format", choices=("text", "json"), default="text",
        help="output format (default: text)",
    )
    parser.add_argument(
        "--max-iterations", type=int, default=DEFAULT_MAX_ITERATIONS,
        metavar="N", help="bound on solver node visits (default: %(default)s)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="increase log verbosity (repeatable)",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, stream: Optional[TextIO] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    out = stream if stream is not None else sys.stdout

    path = Path(args.file).expanduser()
    if not path.exists():
        _log.error("file not found: %s", path)
        return EXIT_INFRA

    try:
        cfg = load_file(path)
        result = run_constant_propagation(cfg, max_iterations=args.max_iterations)
    except (IRLoadError, ConvergenceError, ValueError, OSError) as exc:
        _log.error("%s: %s", path, exc)
        return EXIT_INFRA

    if args.format == "json":
        _emit_json(cfg, result, out)
    else:
        _emit_text(cfg, result, out)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
