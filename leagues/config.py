"""
leagues/config.py - Local configuration management

Reads user config from a platform-appropriate config directory:
  - macOS/Linux: ~/.leagues/config.toml
  - Windows: %APPDATA%\\leagues\\config.toml

Example:
    [arena]
    db = "~/.leagues/leagues.db"
    host = "127.0.0.1"
    port = 8000

    [identity]
    account = "alice.near"   # caller for local CLI operations

    [logging]
    level = "DEBUG"
"""

import logging
import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================


def _get_config_dir() -> Path:
    """Get platform-appropriate config directory."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "leagues"
    return Path.home() / ".leagues"


CONFIG_DIR = _get_config_dir()
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_DB_PATH = "leagues.db"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"


# ============================================================================
# Data Types
# ============================================================================


@dataclass
class ArenaConfig:
    """Where the league store lives and where the server listens."""

    db_path: str = DEFAULT_DB_PATH
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


@dataclass
class IdentityConfig:
    """Default caller for local operations."""

    account: str | None = None


@dataclass
class LeaguesConfig:
    """Top-level configuration."""

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    log_level: str = DEFAULT_LOG_LEVEL


# ============================================================================
# Parsing
# ============================================================================


def _expand(path: str | None) -> str | None:
    """Expand ~ in a path string."""
    if path is None:
        return None
    return str(Path(path).expanduser())


def _section(raw: dict, name: str) -> dict:
    data = raw.get(name, {})
    return data if isinstance(data, dict) else {}


def load_config(path: Path | None = None) -> LeaguesConfig:
    """
    Read config from TOML file.

    Args:
        path: Override config file path (default: ~/.leagues/config.toml)

    Returns:
        LeaguesConfig. Missing file or bad TOML returns defaults.
    """
    config_path = path or CONFIG_PATH

    if not config_path.exists():
        return LeaguesConfig()

    try:
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return LeaguesConfig()

    arena_data = _section(raw, "arena")
    arena = ArenaConfig(
        db_path=_expand(arena_data.get("db")) or DEFAULT_DB_PATH,
        host=arena_data.get("host", DEFAULT_HOST),
        port=arena_data.get("port", DEFAULT_PORT),
    )

    identity = IdentityConfig(account=_section(raw, "identity").get("account"))

    log_level = str(_section(raw, "logging").get("level", DEFAULT_LOG_LEVEL)).upper()

    return LeaguesConfig(arena=arena, identity=identity, log_level=log_level)
