"""
Configuration and constants for Table Diff Checker.

All configurable values are centralized here for easy customization.
Users can create a local config file (.table-diff.json) to override defaults.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


# ============================================================================
# DEFAULT VALUES
# ============================================================================

# Float tolerance for comparisons (None = exact comparison only)
DEFAULT_EPSILON: Optional[float] = None

# Accept when the signed left - right is below epsilon instead of |left - right|
DEFAULT_SIGNED_TOLERANCE: bool = False

# Whether delimited text files start with a header row
DEFAULT_HAS_HEADER: bool = True

# Field delimiter for delimited text files
DEFAULT_CSV_DELIMITER: str = ","

# Rows shown by the view command (0 = all rows)
DEFAULT_VIEW_LIMIT: int = 10

# Compression level used when converting to Parquet with --zstd
ZSTD_COMPRESSION_LEVEL: int = 8

# Local config file name (should be gitignored)
LOCAL_CONFIG_FILENAME: str = ".table-diff.json"


def find_local_config() -> Optional[Path]:
    """
    Search for local config file in current directory and parents.

    Returns:
        Path to config file if found, None otherwise
    """
    current = Path.cwd()

    # Check current directory and parents up to home or root
    for directory in [current] + list(current.parents):
        config_path = directory / LOCAL_CONFIG_FILENAME
        if config_path.exists():
            return config_path
        # Stop at home directory
        if directory == Path.home():
            break

    return None


def load_local_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from a local .table-diff.json file.

    Args:
        config_path: Explicit file to read (searched for when omitted)

    Returns:
        Dictionary of configuration values, empty dict if no config found
    """
    if config_path is None:
        config_path = find_local_config()
    if config_path is None:
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logging.warning(f"Error loading {config_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logging.warning(f"Ignoring {config_path}: top level must be a JSON object")
        return {}
    return data


# Load local config once at module import
_LOCAL_CONFIG: Dict[str, Any] = load_local_config()


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a config value, checking local config first."""
    return _LOCAL_CONFIG.get(key, default)


def validate_epsilon(epsilon: Optional[float]) -> Optional[float]:
    """
    Check that a tolerance is usable.

    Raises:
        ValueError: If epsilon is negative, NaN or infinite
    """
    if epsilon is None:
        return None
    epsilon = float(epsilon)
    if math.isnan(epsilon) or math.isinf(epsilon) or epsilon < 0:
        raise ValueError(f"epsilon must be a finite non-negative number, got {epsilon}")
    return epsilon


@dataclass
class ReadConfig:
    """Configuration for reading input files."""

    has_header: bool = DEFAULT_HAS_HEADER
    csv_delimiter: str = DEFAULT_CSV_DELIMITER

    @classmethod
    def from_local_config(cls, **overrides) -> "ReadConfig":
        """
        Build a config from the local config file, then explicit overrides.

        Overrides that are None leave the file (or default) value in place.
        """
        values = {
            "has_header": bool(get_config_value("has_header", DEFAULT_HAS_HEADER)),
            "csv_delimiter": get_config_value("csv_delimiter", DEFAULT_CSV_DELIMITER),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class CompareConfig:
    """
    Configuration for comparison operations.

    The defaults mean exact comparison; nothing is read from the local
    config file unless ``from_local_config`` is used.
    """

    epsilon: Optional[float] = DEFAULT_EPSILON
    signed_tolerance: bool = DEFAULT_SIGNED_TOLERANCE
    read: ReadConfig = field(default_factory=ReadConfig)

    def __post_init__(self):
        self.epsilon = validate_epsilon(self.epsilon)

    @classmethod
    def from_local_config(cls, read: Optional[ReadConfig] = None, **overrides) -> "CompareConfig":
        """Same as ``ReadConfig.from_local_config`` for comparison settings."""
        values = {
            "epsilon": get_config_value("epsilon", DEFAULT_EPSILON),
            "signed_tolerance": bool(
                get_config_value("signed_tolerance", DEFAULT_SIGNED_TOLERANCE)
            ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(read=read or ReadConfig.from_local_config(), **values)

    @property
    def has_header(self) -> bool:
        return self.read.has_header
