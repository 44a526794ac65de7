"""Longest-suffix matching against a rule tree."""

from __future__ import annotations

from .tree import RuleNode


def split_labels(domain: str) -> list[str]:
    """Lowercase a domain and split it into labels, dropping one trailing root dot."""
    value = (domain or "").strip().lower()
    if value.endswith("."):
        value = value[:-1]
    if not value:
        return []
    return value.split(".")


def match(tree: RuleNode, domain: str) -> str:
    """Return the public suffix of ``domain``, or ``""`` when none is listed.

    Labels are consumed from the outermost end. At each node an exception for
    the next label ends the walk before that label; otherwise a literal child
    is preferred over the wildcard.
    """
    labels = split_labels(domain)
    matched: list[str] = []
    node = tree
    while labels:
        label = labels.pop()
        if label in node.exceptions:
            break
        child = node.children.get(label)
        if child is None:
            child = node.wildcard
        if child is None:
            break
        matched.append(label)
        node = child
    return ".".join(reversed(matched))
