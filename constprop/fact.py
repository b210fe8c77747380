"""
constprop/fact.py
═════════════════

``CPFact`` — the per-program-point abstract state, ``Var → Value``.

Unmapped variables are implicitly UNDEF, so the mapping only ever stores
constants and NAC.  Every mutator reports whether it actually changed the
fact; the worklist solver relies on that flag to decide when to stop.

Facts are mutable and owned by exactly one CFG point at a time.  Use
``copy()`` when a snapshot is needed.
"""

from __future__ import annotations

from typing import Dict, Iterator, KeysView, ItemsView, Optional

from constprop.ir import Var
from constprop.lattice import Value


class CPFact:
    """Mutable mapping from variables to lattice values (absent = UNDEF)."""

    __slots__ = ("_map",)

    def __init__(self, mapping: Optional[Dict[Var, Value]] = None) -> None:
        self._map: Dict[Var, Value] = {}
        if mapping:
            for var, value in mapping.items():
                self.update(var, value)

    def get(self, key: Var) -> Value:
        return self._map.get(key, Value.get_undef())

    def update(self, key: Var, value: Value) -> bool:
        """Bind ``key`` to ``value``; return True if the fact changed."""
        if value.is_undef():
            return self.remove(key) is not None
        old = self._map.get(key)
        self._map[key] = value
        return old != value

    def remove(self, key: Var) -> Optional[Value]:
        return self._map.pop(key, None)

    def copy_from(self, other: CPFact) -> bool:
        """Overwrite with every entry of ``other``; keys only here survive."""
        changed = False
        for key, value in other.items():
            changed |= self.update(key, value)
        return changed

    def copy(self) -> CPFact:
        fact = CPFact()
        fact._map = dict(self._map)
        return fact

    def clear(self) -> None:
        self._map.clear()

    def keys(self) -> KeysView[Var]:
        return self._map.keys()

    def items(self) -> ItemsView[Var, Value]:
        return self._map.items()

    def __iter__(self) -> Iterator[Var]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CPFact):
            return NotImplemented
        return self._map == other._map

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        entries = ", ".join(
            f"{var.name}={value}"
            for var, value in sorted(self._map.items(), key=lambda kv: kv[0].name)
        )
        return f"{{{entries}}}"


__all__ = ["CPFact"]
