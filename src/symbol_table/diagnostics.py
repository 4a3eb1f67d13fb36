# src/symbol_table/diagnostics.py
"""
Diagnostics de solo lectura sobre la tabla de símbolos y el AST.

- snapshot(table) -> SymbolTableSnapshot (pydantic), scopes de interno a externo
- format_table(table) -> tabla de texto (nivel, capacidad, conteo, entradas)
- dump(table, sink) -> escribe format_table en el sink (stdout por defecto)
- dump_json(table) -> JSON del snapshot (útil para el IDE o logging)
- print_ast(node, sink) -> escribe render(node) línea por línea

Ninguna función modifica la tabla ni el árbol; todas son seguras en cualquier
estado (incluido DEGENERATE).
"""

from typing import List, Optional, TextIO
import sys

from pydantic import BaseModel

from ast_nodes import ASTNode, render
from .symbol_table import SymbolTable, datatype_to_string

RULE = "-" * 54


class EntrySnapshot(BaseModel):
    name: str
    type: str
    scope_level: int


class ScopeSnapshot(BaseModel):
    level: int
    capacity: int
    count: int
    entries: List[EntrySnapshot] = []


class SymbolTableSnapshot(BaseModel):
    state: str
    scopes: List[ScopeSnapshot] = []


def snapshot(table: SymbolTable) -> SymbolTableSnapshot:
    scopes = []
    for scope in reversed(table.scopes):
        scopes.append(ScopeSnapshot(
            level=scope.level,
            capacity=scope.capacity,
            count=scope.count,
            entries=[
                EntrySnapshot(name=e.name, type=datatype_to_string(e.type), scope_level=e.scope_level)
                for e in scope.entries
            ],
        ))
    return SymbolTableSnapshot(state=table.state.value, scopes=scopes)


def format_table(table: SymbolTable) -> str:
    cfg = table.config
    snap = snapshot(table)
    lines = ["", "----- Symbol Table (Current View from Innermost Scope) -----"]
    if not snap.scopes:
        lines.append(f"  (No active scope: {snap.state})")
    for idx, scope in enumerate(snap.scopes):
        lines.append(f"Scope Level: {scope.level} (Capacity: {scope.capacity}, Count: {scope.count})")
        lines.append(RULE)
        if not scope.entries:
            lines.append("  (Scope is empty)")
        for e in scope.entries:
            lines.append(
                f"  Name: {e.name:<{cfg.name_width}} | Type: {e.type:<{cfg.type_width}} | Defined Scope: {e.scope_level}"
            )
        lines.append(RULE)
        if idx < len(snap.scopes) - 1:
            lines.append("  |")
            lines.append("  V (Enclosing Scope)")
    lines.append("--- End Symbol Table ---")
    lines.append("")
    return "\n".join(lines) + "\n"


def dump(table: SymbolTable, sink: Optional[TextIO] = None) -> None:
    out = sink if sink is not None else sys.stdout
    out.write(format_table(table))


def dump_json(table: SymbolTable) -> str:
    return snapshot(table).model_dump_json(indent=2)


def print_ast(node: Optional[ASTNode], sink: Optional[TextIO] = None, depth: int = 0) -> None:
    out = sink if sink is not None else sys.stdout
    for line in render(node, depth):
        out.write(line + "\n")
