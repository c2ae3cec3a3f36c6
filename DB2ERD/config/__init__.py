"""Configuration loading (config.yaml + environment)."""

from .loader import find_config_file, load_config, get_config
from .settings import AnalyzerSettings, load_settings

__all__ = ["find_config_file", "load_config", "get_config", "AnalyzerSettings", "load_settings"]
