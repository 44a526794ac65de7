"""Configuration management for pslcache."""

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from .constants import (
    CACHE_FILENAME,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_LIST_URL,
    DEFAULT_TTL_SECONDS,
    DEFAULT_TTS_SECONDS,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "./config/pslcache.yaml"


def default_cache_path() -> Path:
    """Snapshot location in the user's profile (USERPROFILE) or home (HOME) directory."""
    home = os.getenv("USERPROFILE") or os.getenv("HOME") or str(Path.home())
    return Path(home) / CACHE_FILENAME


@dataclass
class Config:
    """Cache configuration loaded from environment and an optional YAML file."""

    tts: float = DEFAULT_TTS_SECONDS
    ttl: float = DEFAULT_TTL_SECONDS
    cache_path: Path = field(default_factory=default_cache_path)
    url: str = DEFAULT_LIST_URL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS


def _load_overrides(path: Path) -> dict:
    """Load the ``pslcache`` section of a YAML override file (optional)."""
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}

    section = data.get("pslcache") if isinstance(data, dict) else None
    if not isinstance(section, dict):
        logger.warning("Ignoring %s: expected a 'pslcache' mapping", path)
        return {}
    return section


def _number(raw: object, default: float, name: str) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = math.nan
    if not math.isfinite(value):
        logger.warning("Invalid value for %s: %r; using %s", name, raw, default)
        return default
    return value


def load_config(config_file: Optional[Path] = None) -> Config:
    """Load configuration from environment variables (and .env), then YAML, then defaults."""
    load_dotenv()

    path = config_file or Path(os.getenv("PSL_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    overrides = _load_overrides(path)

    def _get(env_name: str, key: str) -> object:
        value = os.getenv(env_name)
        if value is not None and value.strip():
            return value.strip()
        return overrides.get(key)

    cache_path = _get("PSL_CACHE_PATH", "cache_path")
    return Config(
        tts=_number(_get("PSL_TTS", "tts"), DEFAULT_TTS_SECONDS, "tts"),
        ttl=_number(_get("PSL_TTL", "ttl"), DEFAULT_TTL_SECONDS, "ttl"),
        cache_path=Path(str(cache_path)).expanduser() if cache_path else default_cache_path(),
        url=str(_get("PSL_URL", "url") or DEFAULT_LIST_URL),
        fetch_timeout=_number(
            _get("PSL_FETCH_TIMEOUT", "fetch_timeout"), DEFAULT_FETCH_TIMEOUT_SECONDS, "fetch_timeout"
        ),
    )


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages."""
    errors: list[str] = []
    if not _positive(config.tts):
        errors.append("PSL_TTS must be a positive number of seconds")
    if not _positive(config.ttl):
        errors.append("PSL_TTL must be a positive number of seconds")
    if not _positive(config.fetch_timeout):
        errors.append("PSL_FETCH_TIMEOUT must be a positive number of seconds")
    if not str(config.cache_path or "").strip():
        errors.append("PSL_CACHE_PATH must not be empty")
    if not (config.url or "").lower().startswith(("http://", "https://")):
        errors.append("PSL_URL must be an http(s) URL")

    if config.ttl < config.tts:
        # Allowed, but data is never served stale.
        logger.warning("PSL_TTL (%s) is shorter than PSL_TTS (%s)", config.ttl, config.tts)

    return errors
