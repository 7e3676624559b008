"""Build configuration system."""

import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class BuildConfig:
    """Configuration for rulemake.

    Attributes:
        root_dir: Directory relative target paths are resolved against (RULEMAKE_ROOT)
        log_level: Minimum log level name or number (RULEMAKE_LOG_LEVEL)
        port: TCP port for the build server (RULEMAKE_PORT)
        host: Interface the build server binds to (RULEMAKE_HOST)
        concurrent: Resolve sibling dependencies concurrently (RULEMAKE_CONCURRENT)
        rules: Rules reference, "module:attr" or "file.py:attr" (RULEMAKE_RULES)
    """

    root_dir: str = "."
    log_level: str = "INFO"
    port: int = 5000
    host: str = "127.0.0.1"
    concurrent: bool = True
    rules: str | None = None

    @property
    def root_path(self) -> Path:
        """Root directory as a resolved path."""
        return Path(self.root_dir).expanduser().resolve()


# Global config instance
_config: BuildConfig | None = None


# ##################################################################
# parse a boolean environment flag
# anything outside the usual truthy spellings is false
def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


# ##################################################################
# get global config instance
# creates default config if none exists, reading from environment variables
def get_config() -> BuildConfig:
    global _config
    if _config is None:
        _config = BuildConfig(
            root_dir=os.environ.get("RULEMAKE_ROOT", "."),
            log_level=os.environ.get("RULEMAKE_LOG_LEVEL", "INFO"),
            port=int(os.environ.get("RULEMAKE_PORT", "5000")),
            host=os.environ.get("RULEMAKE_HOST", "127.0.0.1"),
            concurrent=_env_flag("RULEMAKE_CONCURRENT", True),
            rules=os.environ.get("RULEMAKE_RULES") or None,
        )
    return _config


# ##################################################################
# set global config instance
# replaces the current config with a new one
def set_config(config: BuildConfig | None) -> None:
    global _config
    _config = config
