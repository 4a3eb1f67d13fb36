# tests/conftest.py
# Agrega src/ al sys.path para que "import symbol_table.xxx" y "import ast_nodes" funcionen en pytest.
import sys
import os

import pytest

# calculamos la ruta a src/ (un nivel arriba de tests/)
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))

if SRC not in sys.path:
    sys.path.insert(0, SRC)

from allocator import Allocator  # noqa: E402
from symbol_table.symbol_table import SymbolTable  # noqa: E402


@pytest.fixture
def alloc():
    return Allocator()


@pytest.fixture
def st(alloc):
    table = SymbolTable(allocator=alloc)
    table.init()
    return table
