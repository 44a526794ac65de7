"""Public suffix resolution over a self-refreshing, disk-backed rule cache."""

from .cache import PublicSuffixData, TreeRecord
from .config import Config, load_config, validate_config
from .errors import CorruptSnapshotError, FetchError, FilesystemError, PublicSuffixError, TransportError
from .rules import RuleNode, build_tree, match, parse_rules

__all__ = [
    "Config",
    "CorruptSnapshotError",
    "FetchError",
    "FilesystemError",
    "PublicSuffixData",
    "PublicSuffixError",
    "RuleNode",
    "TransportError",
    "TreeRecord",
    "build_tree",
    "load_config",
    "match",
    "parse_rules",
    "validate_config",
]
