"""Centralized constants for pslcache.

Defaults shared by the configuration layer, the cache and the CLI.
"""

from enum import IntEnum

DEFAULT_LIST_URL = "https://publicsuffix.org/list/effective_tld_names.dat"
DEFAULT_TTS_SECONDS = 864000  # 10 days
DEFAULT_TTL_SECONDS = 2592000  # 30 days
DEFAULT_FETCH_TIMEOUT_SECONDS = 30
CACHE_FILENAME = ".publicsuffix.org"

SNAPSHOT_VERSION = 1

WILDCARD_LABEL = "*"
EXCEPTION_MARKER = "!"
COMMENT_MARKER = "//"


class Freshness(IntEnum):
    """Age classification shared by the memory and disk tiers."""

    FRESH = 0
    STALE = 1
    INVALID = 2

    @classmethod
    def from_age(cls, age: float, tts: float, ttl: float) -> "Freshness":
        """Classify an age in seconds; invalidity is checked independently of staleness."""
        if age > ttl:
            return cls.INVALID
        if age > tts:
            return cls.STALE
        return cls.FRESH

    def __str__(self) -> str:
        return self.name.lower()
