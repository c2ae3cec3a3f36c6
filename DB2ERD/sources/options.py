"""Connection options for catalog row sources."""

from __future__ import annotations

from typing import Dict, Literal, Optional
from pydantic import BaseModel, Field, SecretStr, model_validator


class ConnectionOptions(BaseModel):
    """Where to read the catalog from.

    ``schema_name`` falls back to the user name and ``catalog_name`` to the
    user name as well, matching how PostgreSQL names a user's default schema
    and database.
    """
    engine: Literal["postgresql", "sqlite"] = "postgresql"
    host: str = "localhost"
    port: int = 5432
    user_name: Optional[str] = None
    password: Optional[SecretStr] = None
    database: Optional[str] = None
    owner: Optional[str] = Field(None, description="Schema to analyze")
    path: Optional[str] = Field(None, description="Database file (sqlite only)")
    connect_timeout: int = 10

    @model_validator(mode="after")
    def _check_engine_fields(self) -> "ConnectionOptions":
        if self.engine == "sqlite" and not self.path:
            raise ValueError("sqlite connections require 'path'")
        return self

    @property
    def schema_name(self) -> Optional[str]:
        if self.engine == "sqlite":
            return self.owner or "main"
        return self.owner or self.user_name

    @property
    def catalog_name(self) -> Optional[str]:
        if self.engine == "sqlite":
            return self.database or self.path
        return self.database or self.user_name

    def catalog_params(self) -> Dict[str, Optional[str]]:
        return {"schema_name": self.schema_name, "catalog_name": self.catalog_name}

    def describe(self) -> str:
        if self.engine == "sqlite":
            return f"sqlite:{self.path}"
        return f"postgresql://{self.host}:{self.port}/{self.catalog_name} (schema {self.schema_name})"
