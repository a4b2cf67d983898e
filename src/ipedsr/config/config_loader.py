"""YAML Configuration Loader for IPEDSR.

Loads configuration from YAML files shipped in this directory, or from an
explicit path given by the caller.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import yaml

from .logging_config import get_logger

logger = get_logger("config_loader")

# Get config directory
CONFIG_DIR = Path(__file__).parent

SURVEYS_FILE = "surveys.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""

    pass


def _load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: File name inside the config directory, or an absolute path

    Returns:
        Parsed YAML content as dictionary

    Raises:
        ConfigurationError: If file cannot be loaded
    """
    filepath = Path(path)
    if not filepath.is_absolute():
        filepath = CONFIG_DIR / filepath
    if not filepath.exists():
        raise ConfigurationError(f"Configuration file not found: {filepath}")

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing {filepath.name}: {e}")
    except IOError as e:
        raise ConfigurationError(f"Error reading {filepath.name}: {e}")

    if not isinstance(content, dict):
        raise ConfigurationError(f"{filepath.name} must contain a mapping at the top level")

    logger.debug(f"Loaded configuration from {filepath}")
    return content


def load_survey_data(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load the raw survey registry data.

    Args:
        path: Optional path to a registry YAML file. Defaults to the
            packaged surveys.yaml.

    Returns:
        Dict with 'surveys' and 'lineages' mappings

    Raises:
        ConfigurationError: If the file is missing, malformed or has no surveys
    """
    data = _load_yaml_file(path or SURVEYS_FILE)

    surveys = data.get("surveys")
    if not isinstance(surveys, dict) or not surveys:
        raise ConfigurationError("Survey registry defines no surveys")

    lineages = data.get("lineages") or {}
    if not isinstance(lineages, dict):
        raise ConfigurationError("'lineages' must be a mapping of lineage id to definition")

    return {"surveys": surveys, "lineages": lineages}


def get_list(entry: Dict[str, Any], key: str) -> List[Any]:
    """Read an optional list value from a YAML entry."""
    value = entry.get(key) or []
    if not isinstance(value, list):
        raise ConfigurationError(f"'{key}' must be a list, got {type(value).__name__}")
    return value
