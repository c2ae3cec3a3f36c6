"""Pydantic model for one catalog row (one table column plus its key metadata).

Drivers disagree on how flags come back: PostgreSQL ``bit`` columns arrive as
``"1"``/``"0"``, information_schema uses ``"YES"``/``"NO"`` and SQLite uses
integers. Everything is normalized to ``bool`` here so the resolver never sees
driver-specific values.
"""

from __future__ import annotations

from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator

_TRUE_STRINGS = {"1", "t", "true", "y", "yes"}
_FALSE_STRINGS = {"", "0", "f", "false", "n", "no"}


def coerce_flag(value: Any) -> bool:
    """Convert a driver-specific truth value to ``bool``."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (bytes, bytearray)):
        return any(value)
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        raw = value.strip().lower()
        if raw in _TRUE_STRINGS:
            return True
        if raw in _FALSE_STRINGS:
            return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean flag")


class CatalogRow(BaseModel):
    """One (table, column) descriptor as delivered by a row source."""
    table_catalog: Optional[str] = None
    owner: Optional[str] = Field(None, validation_alias=AliasChoices("owner", "table_schema"))
    table_name: str
    column_name: str
    ordinal_position: int = 0
    default_value: Optional[str] = Field(
        None, validation_alias=AliasChoices("default_value", "default_setting")
    )
    data_type: str = ""
    max_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    date_precision: Optional[int] = None
    is_nullable: bool = True
    is_primary_key: bool = False
    is_unique: bool = False
    is_foreign_key: bool = False
    foreign_key_name: Optional[str] = None
    referenced_table_name: Optional[str] = None
    referenced_column_name: Optional[str] = None

    model_config = {"extra": "allow", "populate_by_name": True}

    @field_validator("is_nullable", mode="before")
    @classmethod
    def _nullable_flag(cls, value: Any) -> bool:
        # A missing nullability flag means the column is nullable
        if value is None:
            return True
        return coerce_flag(value)

    @field_validator("is_primary_key", "is_unique", "is_foreign_key", mode="before")
    @classmethod
    def _key_flags(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("default_value", mode="before")
    @classmethod
    def _default_as_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @property
    def qualified_name(self) -> str:
        return f"{self.table_name}.{self.column_name}"
