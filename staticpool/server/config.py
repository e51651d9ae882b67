"""Server configuration."""

import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from staticpool.common.constants import (
    DEFAULT_GZIP_LEVEL,
    DEFAULT_POOL_SIZE,
    DEFAULT_ROOT,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    ENV_PREFIX,
    MIN_GZIP_SIZE,
)

logger = logging.getLogger("staticpool.server.config")


class ServerSettings(BaseSettings):
    """Server settings loaded from environment or config file."""

    # Server
    root: Path = Field(Path(DEFAULT_ROOT), description="Directory to serve files from")
    host: str = Field(DEFAULT_SERVER_HOST, description="Server bind host")
    port: int = Field(DEFAULT_SERVER_PORT, ge=0, le=65535, description="Server port")

    # I/O pool
    pool_size: int = Field(DEFAULT_POOL_SIZE, ge=1, description="Worker threads for file I/O and compression")
    max_pending: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum queued + running file loads (None = unbounded). "
        "When reached, further requests get 503 until a load finishes. "
        "Env: STATICPOOL_MAX_PENDING",
    )

    # Compression
    gzip_min_size: int = Field(
        MIN_GZIP_SIZE,
        ge=0,
        description="Only files larger than this many bytes are gzip-encoded. "
        "Env: STATICPOOL_GZIP_MIN_SIZE (supports suffixes: 2KB, 1MB, etc.)",
    )
    gzip_level: int = Field(DEFAULT_GZIP_LEVEL, ge=1, le=9, description="gzip compression level")

    # Logging
    log_level: str = Field("INFO", description="Level of the staticpool loggers")

    class Config:
        env_prefix = ENV_PREFIX


def parse_size(value: str) -> int:
    """Parse human-readable size string to bytes.

    Examples: '2KB', '1MB', '500kb', '1024'
    """
    value = value.strip().upper()
    multipliers = {
        "B": 1,
        "KB": 1024,
        "MB": 1024**2,
        "GB": 1024**3,
        "K": 1024,
        "M": 1024**2,
        "G": 1024**3,
    }
    for suffix, mult in sorted(multipliers.items(), key=lambda x: -len(x[0])):
        if value.endswith(suffix):
            num = value[: -len(suffix)].strip()
            return int(float(num) * mult)
    return int(value)


def _parse_yaml_to_settings_dict(config: dict) -> dict:
    """Convert a parsed YAML config dict into a flat settings dict."""
    d: dict = {}

    if "server" in config:
        d.update(config["server"])
    if "pool" in config:
        if "size" in config["pool"]:
            d["pool_size"] = config["pool"]["size"]
        if "max_pending" in config["pool"]:
            d["max_pending"] = config["pool"]["max_pending"]
    if "gzip" in config:
        gz = config["gzip"]
        if "min_size" in gz:
            v = gz["min_size"]
            d["gzip_min_size"] = parse_size(v) if isinstance(v, str) else v
        if "level" in gz:
            d["gzip_level"] = gz["level"]
    if "logging" in config:
        if "level" in config["logging"]:
            d["log_level"] = config["logging"]["level"]

    return d


def _apply_env_overrides(settings_dict: dict) -> None:
    """Apply environment variable overrides to a settings dict (in-place).

    Plain values are picked up by pydantic-settings itself; only values
    that need parsing are handled here.
    """
    env_min_size = os.environ.get(f"{ENV_PREFIX}GZIP_MIN_SIZE", "")
    if env_min_size:
        settings_dict["gzip_min_size"] = parse_size(env_min_size)


# ── Config file auto-discovery ────────────────────────────────

# Paths searched in order when no explicit config is given.
_CONFIG_SEARCH_PATHS = [
    Path("./staticpool.yaml"),
    Path("./config/staticpool.yaml"),
    Path.home() / ".staticpool" / "server.yaml",
]


def discover_config_path() -> Optional[Path]:
    """Find a config file using auto-discovery.

    Search order:
      1. ``$STATICPOOL_CONFIG`` environment variable
      2. ``./staticpool.yaml``
      3. ``./config/staticpool.yaml``
      4. ``~/.staticpool/server.yaml``

    Returns:
        Path to the discovered config file, or None.
    """
    env_path = os.environ.get(f"{ENV_PREFIX}CONFIG", "")
    if env_path:
        p = Path(env_path)
        if p.exists():
            return p
        logger.warning("$%sCONFIG=%s does not exist", ENV_PREFIX, env_path)

    for candidate in _CONFIG_SEARCH_PATHS:
        if candidate.exists():
            return candidate
    return None


def load_server_settings(config_path: Optional[Path] = None) -> ServerSettings:
    """Load server settings from config file + environment variables.

    Environment variables win over values from the file.

    Args:
        config_path: Explicit path to config file.  When ``None``,
            auto-discovery is used (see :func:`discover_config_path`).

    Returns:
        ServerSettings
    """
    import yaml

    resolved_path = config_path
    if resolved_path is None:
        resolved_path = discover_config_path()

    settings_dict: dict = {}

    if resolved_path and resolved_path.exists():
        with open(resolved_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        settings_dict = _parse_yaml_to_settings_dict(config)
        logger.info("Loaded config from %s", resolved_path.resolve())
    else:
        logger.info("No config file found, using defaults + environment variables")

    _apply_env_overrides(settings_dict)

    # Init kwargs beat env vars in pydantic-settings, so drop file values
    # that the environment overrides.
    for field in list(settings_dict):
        if field != "gzip_min_size" and f"{ENV_PREFIX}{field.upper()}" in os.environ:
            del settings_dict[field]

    return ServerSettings(**settings_dict)
