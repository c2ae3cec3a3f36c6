"""Load configuration from YAML file."""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional


def find_config_file(config_path: Optional[str] = None) -> Path:
    """Find config.yaml (explicit path or the one shipped in the config directory)."""
    if config_path:
        config_file = Path(config_path)
    else:
        config_file = Path(__file__).parent / "config.yaml"
    
    if not config_file.exists():
        raise FileNotFoundError(
            f"config.yaml not found at {config_file}. "
            f"Please create the configuration file."
        )
    
    return config_file


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from config.yaml.
    
    Args:
        config_path: Optional path to a YAML file; defaults to the bundled config.yaml
    
    Returns:
        dict: Configuration dictionary
        
    Raises:
        FileNotFoundError: If config.yaml is not found
        yaml.YAMLError: If YAML parsing fails
    """
    config_file = find_config_file(config_path)
    
    with open(config_file, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    
    return config or {}


def get_config(section: Optional[str] = None, config_path: Optional[str] = None) -> Any:
    """
    Get configuration value(s).
    
    Args:
        section: Optional section name (e.g., "analyzer", "logging")
                 If None, returns entire config
        config_path: Optional path to a YAML file
        
    Returns:
        Configuration value or dictionary
    """
    config = load_config(config_path)
    
    if section is None:
        return config
    
    return config.get(section, {})
