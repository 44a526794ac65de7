"""Line parser for the Public Suffix List text format.

Each rule line is returned as its dot-separated labels in file order
(most-specific label first), e.g. ``co.uk`` -> ``["co", "uk"]``.
"""

from __future__ import annotations

import codecs
from typing import Iterable, Iterator, Optional

from ..constants import COMMENT_MARKER


def parse_line(line: str) -> Optional[list[str]]:
    """Return the labels of a rule line, or None for blanks and comments."""
    value = line.strip().lower()
    if not value or value.startswith(COMMENT_MARKER):
        return None
    return value.split(".")


def parse_rules(text: str) -> Iterator[list[str]]:
    """Yield the rules found in a complete list document."""
    for line in text.splitlines():
        rule = parse_line(line)
        if rule is not None:
            yield rule


class RuleStreamParser:
    """Incremental parser fed with raw body chunks.

    The last line of a chunk may be partial, so it is held back until the next
    chunk (or ``close()``) completes it. Bytes are decoded as UTF-8 with an
    incremental decoder so multibyte characters may straddle chunk boundaries.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="strict")
        self._buffer = ""

    def feed(self, chunk: bytes | str) -> list[list[str]]:
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        data = self._buffer + chunk
        lines = data.split("\n")
        self._buffer = lines.pop()
        return [rule for rule in map(parse_line, lines) if rule is not None]

    def close(self) -> list[list[str]]:
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        rule = parse_line(tail)
        return [rule] if rule is not None else []


def iter_stream_rules(chunks: Iterable[bytes | str]) -> Iterator[list[str]]:
    """Parse an iterable of body chunks into rules."""
    parser = RuleStreamParser()
    for chunk in chunks:
        yield from parser.feed(chunk)
    yield from parser.close()
