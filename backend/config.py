"""Configuration settings for the backend API."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    """Application settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra environment variables
    )
    
    # API
    api_title: str = "DB2ERD Backend API"
    api_version: str = "0.1.0"
    # Default to common local dev origins (Vite=5173, CRA=3000).
    # Can be overridden via env var: CORS_ORIGINS='["http://localhost:5173"]'
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    
    # DB2ERD analyzer config file (None = bundled DB2ERD/config/config.yaml)
    db2erd_config_path: str | None = None
    
    # ER diagram storage (Graphviz sources per job)
    er_diagram_storage_path: str = str(Path(__file__).parent / "static")


settings = Settings()
