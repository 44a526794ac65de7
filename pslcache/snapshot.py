"""On-disk snapshot of the rule tree.

The snapshot's age is taken from the file's modification time; the payload
carries no timestamp. Writes go through a temp file that is renamed over the
target, so a failed write leaves any previous snapshot intact.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import secrets
from pathlib import Path
from typing import Optional

from .constants import SNAPSHOT_VERSION
from .errors import CorruptSnapshotError, FilesystemError
from .rules.tree import RuleNode

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Single-file, last-writer-wins store for a serialized rule tree."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    async def stat(self) -> Optional[float]:
        """Return the snapshot mtime, or None if it is missing or cannot be statted."""
        try:
            result = await asyncio.to_thread(self.path.stat)
            return result.st_mtime
        except OSError as e:
            logger.debug(f"No usable snapshot at {self.path}: {e}")
            return None

    async def age(self, now: float) -> Optional[float]:
        mtime = await self.stat()
        if mtime is None:
            return None
        return now - mtime

    async def load(self) -> RuleNode:
        """Read and decode the snapshot; any failure raises CorruptSnapshotError."""
        try:
            content = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptSnapshotError(self.path, f"read failed: {e}") from e
        return self._decode(content)

    def _decode(self, content: str) -> RuleNode:
        try:
            data = json.loads(content)
        except (ValueError, RecursionError) as e:
            raise CorruptSnapshotError(self.path, f"invalid JSON: {e}") from e

        if not isinstance(data, dict) or data.get("version") != SNAPSHOT_VERSION:
            raise CorruptSnapshotError(self.path, "missing or unsupported snapshot version")

        try:
            return RuleNode.from_dict(data.get("tree"))
        except (TypeError, ValueError, RecursionError) as e:
            raise CorruptSnapshotError(self.path, f"malformed tree: {e}") from e

    async def save(self, tree: RuleNode) -> None:
        """Write the snapshot atomically; raises FilesystemError on failure."""
        content = json.dumps({"version": SNAPSHOT_VERSION, "tree": tree.to_dict()}, separators=(",", ":"))
        try:
            await asyncio.to_thread(self._write, content)
        except OSError as e:
            raise FilesystemError(self.path, str(e)) from e

    def _write(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{os.getpid()}.{secrets.token_hex(4)}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            tmp_path.replace(self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
