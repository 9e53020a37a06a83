"""
Configuration loading for PreReview.

Settings are resolved in increasing order of precedence: built-in defaults,
the YAML config file, environment variables (optionally loaded from `.env`)
and finally command line overrides.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from prereview.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".prereviewrc.yaml"
DEFAULT_MAX_FILE_SIZE = 100000
TOLERANCES = ("strict", "moderate", "relaxed")

DEFAULT_CONFIG = """# PreReview Configuration

# Ollama model used for reviews
model: llama3.1:8b

# Ollama server
ollama_base_url: http://localhost:11434

# How aggressively issues are reported: strict, moderate or relaxed
tolerance: moderate

# Require all issues to be fixed before committing
strict: false

# Show detailed output
verbose: false

# File patterns to ignore (glob patterns)
ignore_patterns:
  - "*.min.js"
  - "*.min.css"
  - "vendor/*"
  - "node_modules/*"
  - "*.lock"
  - "go.sum"

# Maximum file size to review (in bytes)
max_file_size: 100000

# Hints about the project that the reviewer should trust
# project_hints:
#   - "Templates escape all output, values are stored raw"

# Extra coding standards files to mention in the review context
# coding_standards:
#   - ".custom-lint-rules.json"
"""

# environment variable -> config field
ENV_OVERRIDES = (
    ("OLLAMA_MODEL", "model"),
    ("PREREVIEW_MODEL", "model"),
    ("OLLAMA_BASE_URL", "ollama_base_url"),
    ("PREREVIEW_TOLERANCE", "tolerance"),
    ("PREREVIEW_STRICT", "strict"),
    ("PREREVIEW_VERBOSE", "verbose"),
    ("PREREVIEW_MAX_FILE_SIZE", "max_file_size"),
)


class ReviewConfig(BaseModel):
    """Settings for one PreReview invocation."""
    model: str = "llama3.1:8b"
    ollama_base_url: str = "http://localhost:11434"
    temperature: float = 0.2
    tolerance: str = "moderate"
    ignore_patterns: List[str] = Field(default_factory=list)
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    project_hints: List[str] = Field(default_factory=list)
    coding_standards: List[str] = Field(default_factory=list)
    strict: bool = False
    verbose: bool = False

    @field_validator("tolerance", mode="before")
    @classmethod
    def normalize_tolerance(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in TOLERANCES else "moderate"

    @field_validator("max_file_size", mode="before")
    @classmethod
    def default_max_file_size(cls, value: Any) -> Any:
        # zero or empty means "use the default"
        if value in (None, "", 0, "0"):
            return DEFAULT_MAX_FILE_SIZE
        return value

    @field_validator("ignore_patterns", "project_hints", "coding_standards", mode="before")
    @classmethod
    def coerce_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


def find_config_file(start_dir: Optional[str] = None) -> Optional[Path]:
    """
    Locate the config file, looking in the working directory then the home directory.

    Args:
        start_dir: Directory to search first. Defaults to the current directory.

    Returns:
        Path to the config file or None.
    """
    candidates = [Path(start_dir or os.getcwd()) / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Read settings from a YAML config file.

    Args:
        path: Config file path.

    Returns:
        Mapping of setting names to values.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> ReviewConfig:
    """
    Build the configuration for one invocation.

    Args:
        path: Explicit config file. When omitted the default locations are searched.
        overrides: Values from the command line; None values are ignored.

    Returns:
        The resolved ReviewConfig.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)

    settings: Dict[str, Any] = {}
    config_path = Path(path) if path else find_config_file()
    if config_path is not None:
        if path and not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug("Using config file %s", config_path)
        settings.update(read_config_file(config_path))

    for env_name, field_name in ENV_OVERRIDES:
        value = os.getenv(env_name)
        if value:
            settings[field_name] = value

    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key] = value

    known = set(ReviewConfig.model_fields)
    unknown = sorted(set(settings) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    try:
        return ReviewConfig(**{k: v for k, v in settings.items() if k in known})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def write_default_config(path: str = CONFIG_FILENAME) -> bool:
    """
    Create a commented default config file.

    Args:
        path: Destination path.

    Returns:
        False if the file already exists, True once written.
    """
    if os.path.exists(path):
        return False
    with open(path, "w", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG)
    os.chmod(path, 0o600)
    return True
