"""
constprop/sexp_reader.py
════════════════════════

Load a procedure CFG from its S-expression serialisation.

Surface syntax
--------------
::

    (procedure NAME
      (params (NAME TYPE) ...)
      (vars   (NAME TYPE) ...)
      (node ID STMT SUCC-ID ...)
      ...)

    STMT := (assign LHS EXP) | (if EXP) | (goto) | (return [EXP])
          | (nop) | (invoke METHOD EXP ...)
    LHS  := NAME | (field NAME FIELD)
    EXP  := INTEGER | NAME
          | (OP EXP EXP)          ;; + - * / % << >> >>> | & ^ == != < > <= >=
          | (neg EXP) | (invoke METHOD EXP ...) | (field NAME FIELD)

The first ``node`` follows the synthetic entry; a node listing no
successors flows to the synthetic exit.  Every shape is validated
strictly and any mismatch raises ``IRLoadError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

import sexpdata
from sexpdata import Symbol

from constprop.errors import IRLoadError
from constprop.ir import (
    CFG,
    AssignStmt,
    BinaryExp,
    Exp,
    FieldAccess,
    GotoStmt,
    IfStmt,
    IntLiteral,
    InvokeExp,
    InvokeStmt,
    LValue,
    NegExp,
    Nop,
    ReturnStmt,
    Stmt,
    Var,
    lookup_operator,
    parse_type,
)

logger = logging.getLogger(__name__)

Sexp = Any  # Union[list, Symbol, str, int, float]


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════

def _sym_name(s: Sexp) -> str:
    if isinstance(s, Symbol):
        return str(s)
    raise IRLoadError(f"Expected symbol, got {type(s).__name__}", s)


def _expect_list(s: Sexp, *, min_len: int = 0, max_len: int = -1, tag: str = "") -> list:
    if not isinstance(s, list):
        raise IRLoadError(f"Expected ({tag} ...) list, got {type(s).__name__}", s)
    if len(s) < min_len or (max_len >= 0 and len(s) > max_len):
        raise IRLoadError(f"Wrong number of elements in ({tag} ...)", s)
    return s


def _as_int(s: Sexp) -> int:
    if isinstance(s, int) and not isinstance(s, bool):
        return s
    raise IRLoadError(f"Expected integer, got {type(s).__name__}", s)


# ═══════════════════════════════════════════════════════════════════════
#  Expressions and statements
# ═══════════════════════════════════════════════════════════════════════

class _Scope:
    """Declared variables of the procedure being loaded."""

    def __init__(self) -> None:
        self.vars: Dict[str, Var] = {}

    def declare(self, decl: Sexp) -> Var:
        decl = _expect_list(decl, min_len=2, max_len=2, tag="NAME TYPE")
        name = _sym_name(decl[0])
        if name in self.vars:
            raise IRLoadError(f"Variable '{name}' declared twice", decl)
        var = Var(name, parse_type(_sym_name(decl[1])))
        self.vars[name] = var
        return var

    def lookup(self, s: Sexp) -> Var:
        name = _sym_name(s)
        try:
            return self.vars[name]
        except KeyError:
            raise IRLoadError(f"Undeclared variable '{name}'", s) from None


def _parse_field(s: list, scope: _Scope) -> FieldAccess:
    _expect_list(s, min_len=3, max_len=3, tag="field")
    return FieldAccess(scope.lookup(s[1]), _sym_name(s[2]))


def _parse_invoke(s: list, scope: _Scope) -> InvokeExp:
    _expect_list(s, min_len=2, tag="invoke")
    return InvokeExp(_sym_name(s[1]), tuple(_parse_exp(a, scope) for a in s[2:]))


def _parse_exp(s: Sexp, scope: _Scope) -> Exp:
    if isinstance(s, int) and not isinstance(s, bool):
        return IntLiteral(s)
    if isinstance(s, Symbol):
        return scope.lookup(s)
    s = _expect_list(s, min_len=1, tag="expression")
    head = _sym_name(s[0])
    if head == "neg":
        _expect_list(s, min_len=2, max_len=2, tag="neg")
        return NegExp(_parse_exp(s[1], scope))
    if head == "invoke":
        return _parse_invoke(s, scope)
    if head == "field":
        return _parse_field(s, scope)
    operator = lookup_operator(head)
    if operator is None:
        raise IRLoadError(f"Unknown expression form '{head}'", s)
    _expect_list(s, min_len=3, max_len=3, tag=head)
    return BinaryExp(operator, _parse_exp(s[1], scope), _parse_exp(s[2], scope))


_STMT_DISPATCH: Dict[str, Callable[[list, _Scope], Stmt]] = {}


def _register(tag: str):
    def deco(fn):
        _STMT_DISPATCH[tag] = fn
        return fn
    return deco


@_register("assign")
def _parse_assign(s: list, scope: _Scope) -> AssignStmt:
    _expect_list(s, min_len=3, max_len=3, tag="assign")
    lvalue: LValue
    if isinstance(s[1], list):
        lvalue = _parse_field(s[1], scope)
    else:
        lvalue = scope.lookup(s[1])
    return AssignStmt(lvalue, _parse_exp(s[2], scope))


@_register("if")
def _parse_if(s: list, scope: _Scope) -> IfStmt:
    _expect_list(s, min_len=2, max_len=2, tag="if")
    return IfStmt(_parse_exp(s[1], scope))


@_register("goto")
def _parse_goto(s: list, scope: _Scope) -> GotoStmt:
    _expect_list(s, max_len=1, tag="goto")
    return GotoStmt()


@_register("return")
def _parse_return(s: list, scope: _Scope) -> ReturnStmt:
    _expect_list(s, max_len=2, tag="return")
    return ReturnStmt(_parse_exp(s[1], scope) if len(s) == 2 else None)


@_register("nop")
def _parse_nop(s: list, scope: _Scope) -> Nop:
    _expect_list(s, max_len=1, tag="nop")
    return Nop()


@_register("invoke")
def _parse_invoke_stmt(s: list, scope: _Scope) -> InvokeStmt:
    return InvokeStmt(_parse_invoke(s, scope))


def _parse_stmt(s: Sexp, scope: _Scope) -> Stmt:
    s = _expect_list(s, min_len=1, tag="statement")
    head = _sym_name(s[0])
    parser = _STMT_DISPATCH.get(head)
    if parser is None:
        raise IRLoadError(f"Unknown statement form '{head}'", s)
    return parser(s, scope)


# ═══════════════════════════════════════════════════════════════════════
#  Procedures
# ═══════════════════════════════════════════════════════════════════════

def build_procedure(form: Sexp) -> CFG:
    """Build a CFG from an already-read ``(procedure ...)`` form."""
    form = _expect_list(form, min_len=2, tag="procedure")
    if _sym_name(form[0]) != "procedure":
        raise IRLoadError("Expected (procedure ...)", form[0])
    name = _sym_name(form[1])

    scope = _Scope()
    params: List[Var] = []
    node_forms: List[list] = []
    for item in form[2:]:
        item = _expect_list(item, min_len=1, tag="procedure item")
        head = _sym_name(item[0])
        if head == "params":
            params.extend(scope.declare(d) for d in item[1:])
        elif head == "vars":
            for d in item[1:]:
                scope.declare(d)
        elif head == "node":
            node_forms.append(_expect_list(item, min_len=3, tag="node"))
        else:
            raise IRLoadError(f"Unknown procedure item '{head}'", item)

    if not node_forms:
        raise IRLoadError(f"Procedure '{name}' has no nodes", form)

    cfg = CFG(name, params)
    nodes: Dict[int, Stmt] = {}
    edges: List[Tuple[Stmt, List[Sexp]]] = []
    for position, nf in enumerate(node_forms):
        node_id = _as_int(nf[1])
        if node_id in nodes:
            raise IRLoadError(f"Duplicate node id {node_id}", nf)
        stmt = _parse_stmt(nf[2], scope)
        stmt.index = position
        nodes[node_id] = cfg.add_node(stmt)
        edges.append((stmt, list(nf[3:])))

    cfg.add_edge(cfg.entry, nodes[_as_int(node_forms[0][1])])
    for stmt, succ_ids in edges:
        if not succ_ids:
            cfg.add_edge(stmt, cfg.exit)
        for succ in succ_ids:
            succ_id = _as_int(succ)
            if succ_id not in nodes:
                raise IRLoadError(f"Edge to unknown node {succ_id}", succ)
            cfg.add_edge(stmt, nodes[succ_id])

    logger.debug("Loaded %r", cfg)
    return cfg


def load_procedure(text: str) -> CFG:
    """Parse procedure text and build its CFG."""
    try:
        form = sexpdata.loads(text, nil=None, true=None, false=None)
    except Exception as exc:
        raise IRLoadError(f"Malformed S-expression: {exc}") from exc
    return build_procedure(form)


def load_file(path: Union[str, Path]) -> CFG:
    """Read and load a procedure file."""
    return load_procedure(Path(path).read_text(encoding="utf-8"))


__all__ = [
    "build_procedure",
    "load_procedure",
    "load_file",
]
