# src/allocator.py
"""
Allocator: bookkeeping de memoria para el front-end (AST + tabla de símbolos).

Python maneja la memoria real; este módulo modela un allocator que *puede fallar*
para que la tabla de símbolos y el AST distingan:
- crecimiento fallido de un arreglo (recuperable -> resize() devuelve False)
- fallo al reservar un bloque completo (irrecuperable -> AllocationFailure)

Kinds usados por el proyecto:
    "node"  -> un nodo del AST
    "name"  -> copia propia de un nombre (identificadores, símbolos)
    "scope" -> estructura de un scope
    "slots" -> capacidad del arreglo de entradas de un scope
    "entry" -> una entrada de símbolo

Uso típico en tests:
    alloc = Allocator(deny={"entry"})
    table = SymbolTable(allocator=alloc)
"""

from collections import Counter
from typing import Dict, Iterable, Optional


class AllocationFailure(MemoryError):
    """Unrecoverable allocation failure (a whole block could not be acquired)."""

    def __init__(self, kind: str, units: int, reason: str):
        super().__init__(f"Out of memory allocating {units} '{kind}' unit(s): {reason}")
        self.kind = kind
        self.units = units


class Allocator:
    def __init__(self, budget: Optional[int] = None, deny: Iterable[str] = ()):
        """
        budget: máximo de unidades vivas (todas las kinds); None = sin límite
        deny: kinds que siempre fallan (útil para simular OOM en tests)
        """
        if budget is not None and budget < 0:
            raise ValueError("budget must be >= 0")
        self.budget = budget
        self.deny = set(deny)
        self._live: Counter = Counter()
        self.total_allocations: int = 0

    # ---------- allocation API ----------

    def allocate(self, kind: str, units: int = 1) -> None:
        """Reserve `units` of `kind`. Raises AllocationFailure if it cannot."""
        reason = self._refusal(kind, units)
        if reason:
            raise AllocationFailure(kind, units, reason)
        self._live[kind] += units
        self.total_allocations += 1

    def resize(self, kind: str, old_units: int, new_units: int) -> bool:
        """
        Grow/shrink a block from old_units to new_units.
        Returns False and leaves the books untouched when growth is refused.
        """
        if self._live[kind] < old_units:
            raise ValueError(f"resize of {old_units} '{kind}' unit(s) but only {self._live[kind]} live")
        delta = new_units - old_units
        if delta > 0 and self._refusal(kind, delta):
            return False
        self._live[kind] += delta
        if not self._live[kind]:
            del self._live[kind]
        return True

    def release(self, kind: str, units: int = 1) -> None:
        if self._live[kind] < units:
            raise ValueError(f"release of {units} '{kind}' unit(s) but only {self._live[kind]} live")
        self._live[kind] -= units
        if not self._live[kind]:
            del self._live[kind]

    # ---------- inspection ----------

    def live(self, kind: Optional[str] = None) -> int:
        if kind is None:
            return sum(self._live.values())
        return self._live[kind]

    def snapshot(self) -> Dict[str, int]:
        """Live units per kind (copy)."""
        return dict(self._live)

    def reset(self) -> None:
        """Reset counters (useful for tests)."""
        self._live.clear()
        self.total_allocations = 0

    def _refusal(self, kind: str, units: int) -> Optional[str]:
        if kind in self.deny:
            return "kind denied"
        if self.budget is not None and self.live() + units > self.budget:
            return f"budget of {self.budget} exceeded"
        return None

    def __repr__(self) -> str:
        return f"Allocator(budget={self.budget}, live={dict(self._live)})"
