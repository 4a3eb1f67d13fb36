# src/symbol_table/config.py
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field


INITIAL_SCOPE_CAPACITY = 10


class SymbolTableConfig(BaseModel):
    """Tunables for SymbolTable storage and for the diagnostic dump."""

    initial_capacity: int = Field(default=INITIAL_SCOPE_CAPACITY, gt=0)
    # factor de crecimiento del arreglo de entradas cuando se llena
    growth_factor: int = Field(default=2, ge=2)
    name_width: int = Field(default=15, ge=1)
    type_width: int = Field(default=10, ge=1)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]] = None) -> "SymbolTableConfig":
        return cls(**dict(data or {}))
