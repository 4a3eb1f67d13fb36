from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, TextIO, Tuple
import logging

from allocator import Allocator, AllocationFailure
from .config import SymbolTableConfig

log = logging.getLogger(__name__)


class DataType(Enum):
    INT = "INT"
    FLOAT = "FLOAT"
    CHAR = "CHAR"
    VOID = "VOID"
    UNDEFINED = "UNDEFINED"  # errores o tipo sin inicializar

    @classmethod
    def from_name(cls, name: str) -> "DataType":
        """'int' / 'INT' -> DataType.INT; anything unknown -> UNDEFINED."""
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            return cls.UNDEFINED

    def __str__(self) -> str:
        return self.value


def datatype_to_string(sym_type: DataType) -> str:
    if isinstance(sym_type, DataType):
        return sym_type.value
    return "UNKNOWN_TYPE"


class Status(Enum):
    OK = "ok"
    REDECLARATION = "redeclaration"
    NOT_FOUND = "not_found"
    NO_ACTIVE_SCOPE = "no_active_scope"
    STORAGE_GROWTH_FAILURE = "storage_growth_failure"


class TableState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DEGENERATE = "degenerate"  # init hecho pero la pila quedó vacía


class SymbolEntry:
    def __init__(self, name: str, sym_type: DataType, scope_level: int):
        self.name = str(name)
        self.type = sym_type
        self.scope_level = scope_level

    def __repr__(self):
        return f"SymbolEntry(name={self.name!r}, type={self.type.value}, scope_level={self.scope_level})"


@dataclass(frozen=True)
class SymbolResult:
    status: Status
    entry: Optional[SymbolEntry] = None

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def __bool__(self) -> bool:
        return self.ok


class Scope:
    """
    One lexical scope: insertion-ordered entries with an explicit capacity.

    `enclosing` is a plain link to the next scope outward; the SymbolTable owns
    every scope and clears the link when the scope is closed.
    """

    def __init__(self, level: int, capacity: int, enclosing: Optional["Scope"] = None):
        self.level = level
        self.capacity = capacity
        self.enclosing = enclosing
        self._entries: List[SymbolEntry] = []

    @property
    def count(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[SymbolEntry, ...]:
        return tuple(self._entries)

    @property
    def is_full(self) -> bool:
        return self.count >= self.capacity

    def find(self, name: str) -> Optional[SymbolEntry]:
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def __repr__(self):
        return f"Scope(level={self.level}, count={self.count}, capacity={self.capacity})"


class SymbolTable:
    def __init__(self, config: Optional[SymbolTableConfig] = None, allocator: Optional[Allocator] = None):
        self.config = config or SymbolTableConfig()
        self.allocator = allocator or Allocator()
        # pila de scopes; el root está en index 0, el actual al final
        self.scopes: List[Scope] = []
        self._level_counter = -1  # último nivel asignado
        self._initialized = False
        # historial de errores (registro, no excepciones)
        self._errors: List[str] = []

    # ---------- lifecycle ----------

    @property
    def state(self) -> TableState:
        if not self._initialized:
            return TableState.UNINITIALIZED
        return TableState.ACTIVE if self.scopes else TableState.DEGENERATE

    def init(self) -> Scope:
        """Reset the table and open the global scope (level 0)."""
        self._release_all()
        self._level_counter = -1
        root = self.open_scope()
        log.info("[SymbolTable] Initialized. Global scope (level %d) opened.", root.level)
        return root

    def teardown(self) -> None:
        """Release every live scope and go back to UNINITIALIZED."""
        self._release_all()
        self._initialized = False
        log.debug("[SymbolTable] Torn down.")

    # ---------- scope management ----------

    def open_scope(self) -> Scope:
        """
        Push a new scope one level above the highest level ever assigned.
        Levels are never reused, even after closes or from DEGENERATE.
        Raises AllocationFailure if the scope itself cannot be allocated.
        """
        level = self._level_counter + 1
        capacity = self.config.initial_capacity
        try:
            self.allocator.allocate("scope")
        except AllocationFailure:
            log.critical("Fatal Error: Out of memory creating new scope.")
            raise
        try:
            self.allocator.allocate("slots", capacity)
        except AllocationFailure:
            self.allocator.release("scope")
            log.critical("Fatal Error: Out of memory for scope entries array.")
            raise

        scope = Scope(level, capacity, self.current_scope)
        self.scopes.append(scope)
        self._level_counter = level
        self._initialized = True
        log.debug("[SymbolTable] Opened scope level %d.", level)
        return scope

    def close_scope(self) -> Status:
        """
        Pop the current scope and release its entries and storage.
        Closing the last remaining scope leaves the table DEGENERATE.
        """
        if not self.scopes:
            self._record("No scope to close")
            return Status.NO_ACTIVE_SCOPE

        scope = self.scopes.pop()
        if not self.scopes:
            log.warning("[SymbolTable] Root scope (level %d) closed; no scope is active for new entries.",
                        scope.level)
        self._release_scope(scope)
        log.debug("[SymbolTable] Closed scope level %d.", scope.level)
        return Status.OK

    @contextmanager
    def scope(self) -> Iterator[Scope]:
        """Open a scope for the duration of a `with` block."""
        opened = self.open_scope()
        try:
            yield opened
        finally:
            if opened in self.scopes:
                while self.scopes[-1] is not opened:
                    self.close_scope()
                self.close_scope()

    @property
    def current_scope(self) -> Optional[Scope]:
        return self.scopes[-1] if self.scopes else None

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def levels(self) -> List[int]:
        """Levels of the live scopes, innermost first."""
        return [s.level for s in reversed(self.scopes)]

    # ---------- symbols ----------

    def insert(self, name: str, sym_type: DataType) -> SymbolResult:
        """
        Declare `name` in the current scope.

        Only the current scope is checked for an existing declaration; outer
        declarations of the same name are shadowed, not rejected.
        Recoverable failures come back as the result status; entry allocation
        failure raises AllocationFailure.
        """
        scope = self.current_scope
        if scope is None:
            self._record("Cannot insert symbol, no current scope")
            return SymbolResult(Status.NO_ACTIVE_SCOPE)

        if scope.find(name) is not None:
            self._record(f"Duplicate declaration of '{name}'")
            return SymbolResult(Status.REDECLARATION)

        if scope.is_full and not self._grow(scope):
            self._record(f"Out of memory reallocating scope entries array (level {scope.level}, "
                         f"capacity {scope.capacity})")
            return SymbolResult(Status.STORAGE_GROWTH_FAILURE)

        try:
            self.allocator.allocate("entry")
        except AllocationFailure:
            log.critical("Fatal Error: Out of memory creating new symbol entry.")
            raise
        try:
            self.allocator.allocate("name")
        except AllocationFailure:
            self.allocator.release("entry")
            log.critical("Fatal Error: Out of memory duplicating symbol name.")
            raise

        entry = SymbolEntry(name, sym_type, scope.level)
        scope._entries.append(entry)
        log.debug("[SymbolTable] Inserted '%s' (type: %s) into scope level %d.",
                  name, datatype_to_string(sym_type), scope.level)
        return SymbolResult(Status.OK, entry)

    def lookup_current_scope(self, name: str) -> Optional[SymbolEntry]:
        scope = self.current_scope
        if scope is None:
            return None
        return scope.find(name)

    def lookup(self, name: str) -> Optional[SymbolEntry]:
        """Search from the innermost scope outward; first match wins."""
        for scope in reversed(self.scopes):
            entry = scope.find(name)
            if entry is not None:
                return entry
        return None

    def resolve(self, name: str) -> SymbolResult:
        """lookup() as a result value: OK with the entry, or NOT_FOUND."""
        entry = self.lookup(name)
        if entry is None:
            return SymbolResult(Status.NOT_FOUND)
        return SymbolResult(Status.OK, entry)

    # ---------- diagnostics ----------

    def dump(self, sink: Optional[TextIO] = None) -> None:
        from .diagnostics import dump
        dump(self, sink)

    # errores (métodos auxiliares)
    def get_errors(self) -> List[str]:
        return list(self._errors)

    def add_error(self, msg: str) -> None:
        self._errors.append(msg)

    def clear_errors(self) -> None:
        self._errors.clear()

    # ---------- internals ----------

    def _grow(self, scope: Scope) -> bool:
        new_capacity = scope.capacity * self.config.growth_factor
        if not self.allocator.resize("slots", scope.capacity, new_capacity):
            return False
        log.debug("[SymbolTable] Scope level %d grew %d -> %d.", scope.level, scope.capacity, new_capacity)
        scope.capacity = new_capacity
        return True

    def _release_scope(self, scope: Scope) -> None:
        for _ in scope._entries:
            self.allocator.release("name")
            self.allocator.release("entry")
        scope._entries.clear()
        self.allocator.release("slots", scope.capacity)
        self.allocator.release("scope")
        scope.enclosing = None

    def _release_all(self) -> None:
        while self.scopes:
            self._release_scope(self.scopes.pop())

    def _record(self, msg: str) -> None:
        self._errors.append(msg)
        log.warning("[SymbolTable] %s", msg)

    def __repr__(self) -> str:
        return f"SymbolTable(state={self.state.value}, levels={self.levels()})"
