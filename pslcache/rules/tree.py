"""Rule tree built from Public Suffix List rules.

The tree is rooted at the outermost label. Each node keeps literal children,
an optional wildcard child and exception entries in separate slots, so a
literal label can never be mistaken for the wildcard or an exception marker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..constants import EXCEPTION_MARKER, WILDCARD_LABEL


@dataclass
class RuleNode:
    """One label position in the rule tree."""

    children: dict[str, "RuleNode"] = field(default_factory=dict)
    wildcard: Optional["RuleNode"] = None
    exceptions: dict[str, "RuleNode"] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.children and self.wildcard is None and not self.exceptions

    def insert(self, segments: list[str]) -> None:
        """Insert one rule given most-specific label first (``["co", "uk"]``)."""
        node = self
        for raw in reversed(segments):
            label = raw.strip().lower()
            if label == WILDCARD_LABEL:
                if node.wildcard is None:
                    node.wildcard = RuleNode()
                node = node.wildcard
            elif label.startswith(EXCEPTION_MARKER):
                node = node.exceptions.setdefault(label[len(EXCEPTION_MARKER):], RuleNode())
            else:
                node = node.children.setdefault(label, RuleNode())

    def rule_count(self) -> int:
        """Count the leaf paths below this node."""
        nodes = list(self.children.values()) + list(self.exceptions.values())
        if self.wildcard is not None:
            nodes.append(self.wildcard)
        return sum(node.rule_count() if not node.is_empty() else 1 for node in nodes)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.children:
            data["children"] = {label: child.to_dict() for label, child in self.children.items()}
        if self.wildcard is not None:
            data["wildcard"] = self.wildcard.to_dict()
        if self.exceptions:
            data["exceptions"] = {label: child.to_dict() for label, child in self.exceptions.items()}
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "RuleNode":
        """Rebuild a node from ``to_dict`` output; raises on malformed input."""
        if not isinstance(data, dict):
            raise TypeError(f"Expected a mapping for a rule node, got {type(data).__name__}")
        unknown = set(data) - {"children", "wildcard", "exceptions"}
        if unknown:
            raise ValueError(f"Unknown rule node keys: {sorted(unknown)}")

        node = cls()
        for label, child in _mapping(data, "children").items():
            node.children[str(label)] = cls.from_dict(child)
        for label, child in _mapping(data, "exceptions").items():
            node.exceptions[str(label)] = cls.from_dict(child)
        if data.get("wildcard") is not None:
            node.wildcard = cls.from_dict(data["wildcard"])
        return node


def _mapping(data: dict, key: str) -> dict:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise TypeError(f"Expected a mapping for {key!r}, got {type(value).__name__}")
    return value


def build_tree(rules: Iterable[list[str]]) -> RuleNode:
    """Fold rules into a single tree, reusing shared path prefixes."""
    root = RuleNode()
    for segments in rules:
        if segments:
            root.insert(segments)
    return root
