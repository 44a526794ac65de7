"""Rule parsing, tree building and suffix matching."""

from .matcher import match, split_labels
from .parser import RuleStreamParser, iter_stream_rules, parse_line, parse_rules
from .tree import RuleNode, build_tree

__all__ = [
    "RuleNode",
    "RuleStreamParser",
    "build_tree",
    "iter_stream_rules",
    "match",
    "parse_line",
    "parse_rules",
    "split_labels",
]
