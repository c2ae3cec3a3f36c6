"""Analyzer settings: config.yaml values overridden by DB2ERD_* environment variables."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .loader import get_config


class AnalyzerSettings(BaseSettings):
    """Settings for one analysis run."""
    
    model_config = SettingsConfigDict(
        env_prefix="DB2ERD_",
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=(),
    )
    
    model_name: str = "Data Model"
    progress_interval_seconds: float = Field(8.0, gt=0)
    enforce_contiguous_tables: bool = True
    
    log_level: str = "INFO"
    log_format: str = "detailed"
    log_to_file: bool = False
    log_file: Optional[str] = None


def load_settings(config_path: Optional[str] = None, **overrides: Any) -> AnalyzerSettings:
    """
    Build settings from config.yaml, the environment and explicit overrides.
    
    Precedence (highest first): ``overrides``, environment, config.yaml.
    """
    analyzer_section = get_config("analyzer", config_path) or {}
    logging_section = get_config("logging", config_path) or {}
    
    yaml_values: Dict[str, Any] = dict(analyzer_section)
    for key, target in (("level", "log_level"), ("format", "log_format"),
                        ("log_to_file", "log_to_file"), ("log_file", "log_file")):
        if key in logging_section:
            yaml_values[target] = logging_section[key]
    
    env_values = AnalyzerSettings().model_dump(exclude_unset=True)
    merged = {**yaml_values, **env_values, **overrides}
    return AnalyzerSettings(**merged)
