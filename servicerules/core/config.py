"""Configuration management for service-rules.

This module handles loading, saving, and validating the rule filter
configuration from JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Default paths
DEFAULT_CONFIG_DIR = Path(os.environ.get("SERVICERULES_HOME", "~/.servicerules"))
DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_LOGS_DIR = "logs"

# Keys accepted for the list of rule files, first match wins
SERVICES_FILES_KEYS = ("servicesfiles", "servicesFiles", "services_files")


@dataclass
class FilterConfig:
    """Configuration for the service rule filter.

    Attributes:
        config_dir: Base directory for service-rules data
        logs_dir: Directory for log files
        services_files: Rule files to load, in match priority order
        known_types: Service types the consuming system understands
            (empty means any type is accepted without warning)
    """

    config_dir: Path = field(default_factory=lambda: DEFAULT_CONFIG_DIR.expanduser())
    logs_dir: Path = field(default_factory=lambda: Path(DEFAULT_LOGS_DIR))
    services_files: list[str] = field(default_factory=list)
    known_types: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Resolve relative paths to absolute paths."""
        if not self.logs_dir.is_absolute():
            self.logs_dir = self.config_dir / self.logs_dir

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        for directory in [self.config_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for JSON serialization."""
        return {
            "config_dir": str(self.config_dir),
            "logs_dir": str(self.logs_dir),
            "servicesfiles": list(self.services_files),
            "known_types": list(self.known_types),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterConfig":
        """Create configuration from dictionary."""
        services_files: list[str] = []
        for key in SERVICES_FILES_KEYS:
            if key in data:
                services_files = [str(f) for f in data[key] or []]
                break

        # logs_dir stays relative until __post_init__ places it under config_dir
        return cls(
            config_dir=Path(data.get("config_dir") or DEFAULT_CONFIG_DIR).expanduser(),
            logs_dir=Path(data.get("logs_dir") or DEFAULT_LOGS_DIR),
            services_files=services_files,
            known_types=[str(t) for t in data.get("known_types") or []],
        )


def load_config(config_path: Path | None = None) -> FilterConfig:
    """Load configuration from file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        FilterConfig object with loaded settings.

    Raises:
        json.JSONDecodeError: If config file contains invalid JSON.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_DIR.expanduser() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        # Return default config if no config file exists
        return FilterConfig()

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    return FilterConfig.from_dict(data)


def save_config(config: FilterConfig, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: FilterConfig object to save.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = config.config_dir / DEFAULT_CONFIG_FILE

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


def get_default_config() -> FilterConfig:
    """Get the default configuration."""
    return FilterConfig()
