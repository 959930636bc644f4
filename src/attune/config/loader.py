"""Configuration loader for Attune.

Loads config.py from the project root, falling back to defaults.
"""

import importlib.util
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from . import defaults

# Keys that may also come from the environment when config.py leaves them empty
ENV_KEYS = ("GROQ_API_KEY",)


class Config:
    """Configuration object with attribute access."""

    def __init__(self) -> None:
        # Start with defaults
        for key in defaults.CONFIG_KEYS:
            setattr(self, key, getattr(defaults, key))

        # Load user config if available
        self._load_user_config()
        self._load_env()

    def _load_user_config(self) -> None:
        """Load config.py from project root."""
        config_path = self._find_config_file()

        if config_path is None:
            return

        user_config = self._load_module_from_path(config_path)

        # Override defaults with user values
        for key in defaults.CONFIG_KEYS:
            if hasattr(user_config, key):
                setattr(self, key, getattr(user_config, key))

    def _load_env(self) -> None:
        """Fill secrets from the environment if config.py did not set them."""
        for key in ENV_KEYS:
            if not getattr(self, key) and os.environ.get(key):
                setattr(self, key, os.environ[key])

    def _find_config_file(self) -> Path | None:
        """Find config.py in current dir or parents."""
        current = Path.cwd()

        # Also check where the package is installed
        package_root = Path(__file__).parent.parent.parent.parent

        search_paths = [current, package_root]

        # Walk up from cwd
        while current != current.parent:
            search_paths.append(current)
            current = current.parent

        for path in search_paths:
            config_path = path / "config.py"
            if config_path.exists():
                return config_path

        return None

    def _load_module_from_path(self, path: Path) -> ModuleType:
        """Load a Python module from a file path."""
        spec = importlib.util.spec_from_file_location("attune_user_config", path)
        if spec is None or spec.loader is None:
            raise RuntimeError(f"Could not load config from {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules["attune_user_config"] = module
        spec.loader.exec_module(module)
        return module

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value with optional default."""
        return getattr(self, key, default)

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.ENRICHMENT_ENABLED and not self.GROQ_API_KEY:
            errors.append("GROQ_API_KEY is not set (enrichment will fall back to rules)")

        if self.ENRICHMENT_TIMEOUT_S <= 0:
            errors.append("ENRICHMENT_TIMEOUT_S must be positive")

        if self.CYCLE_COOLDOWN_S < 0:
            errors.append("CYCLE_COOLDOWN_S must not be negative")

        if self.NUDGE_MAX_PER_DAY < 1:
            errors.append("NUDGE_MAX_PER_DAY must be at least 1")

        return errors

    def __repr__(self) -> str:
        return f"<Config enrichment={self.ENRICHMENT_ENABLED} key={bool(self.GROQ_API_KEY)}>"


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from disk."""
    global _config
    _config = Config()
    return _config
