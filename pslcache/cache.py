"""Three-tier freshness cache for the Public Suffix List.

Trees are served from, in order:
- an in-memory record with time-to-stale (TTS) and time-to-live (TTL) deadlines
- an on-disk snapshot whose age comes from its modification time
- the remote list, fetched and parsed on demand

Stale data is still served while a refresh runs in the background; errors from
those background refreshes are logged and discarded. Only a lookup that has no
usable memory or disk data blocks on the network and sees its failures.

Usage:
    data = PublicSuffixData(tts=3600, ttl=86400)
    await data.get_tld("example.co.uk")     # "co.uk"
    await data.get_domain("www.example.co.uk")  # "example.co.uk"
    await data.aclose()
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Coroutine, Optional

from .config import Config, default_cache_path
from .constants import (
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_LIST_URL,
    DEFAULT_TTL_SECONDS,
    DEFAULT_TTS_SECONDS,
    Freshness,
)
from .errors import CorruptSnapshotError, FilesystemError
from .fetcher import fetch_rule_tree
from .rules.matcher import match, split_labels
from .rules.tree import RuleNode
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class TreeRecord:
    """A loaded rule tree with its staleness and expiry deadlines."""

    __slots__ = ("tree", "tts_deadline", "ttl_deadline")

    def __init__(self, tree: RuleNode, tts_deadline: float, ttl_deadline: float):
        self.tree = tree
        self.tts_deadline = tts_deadline
        self.ttl_deadline = ttl_deadline

    @classmethod
    def loaded_at(cls, tree: RuleNode, now: float, tts: float, ttl: float) -> "TreeRecord":
        return cls(tree, now + tts, now + ttl)

    def is_stale(self, now: float) -> bool:
        return now >= self.tts_deadline

    def is_expired(self, now: float) -> bool:
        return now >= self.ttl_deadline


class PublicSuffixData:
    """Resolves public suffixes over a self-refreshing rule tree."""

    def __init__(
        self,
        tts: Optional[float] = None,
        ttl: Optional[float] = None,
        cache: Optional[Path | str] = None,
        url: Optional[str] = None,
        fetch_timeout: Optional[float] = None,
    ):
        """
        Initialize the cache.

        Args:
            tts: Seconds before loaded data is refreshed in the background
            ttl: Seconds before loaded data is no longer served
            cache: Snapshot file path (defaults to ~/.publicsuffix.org)
            url: Suffix list URL
            fetch_timeout: Total timeout in seconds for one list download
        """
        self.tts = float(tts if tts is not None else DEFAULT_TTS_SECONDS)
        self.ttl = float(ttl if ttl is not None else DEFAULT_TTL_SECONDS)
        self.url = url or DEFAULT_LIST_URL
        self.fetch_timeout = float(fetch_timeout if fetch_timeout is not None else DEFAULT_FETCH_TIMEOUT_SECONDS)
        self.snapshot = SnapshotStore(cache if cache is not None else default_cache_path())

        self._record: Optional[TreeRecord] = None
        self._background: set[asyncio.Task] = set()

        if self.ttl < self.tts:
            logger.warning(f"ttl ({self.ttl}s) is shorter than tts ({self.tts}s); stale data will never be served")

    @classmethod
    def from_config(cls, config: Config) -> "PublicSuffixData":
        return cls(
            tts=config.tts,
            ttl=config.ttl,
            cache=config.cache_path,
            url=config.url,
            fetch_timeout=config.fetch_timeout,
        )

    @property
    def record(self) -> Optional[TreeRecord]:
        return self._record

    async def __aenter__(self) -> "PublicSuffixData":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # Lookups

    async def get_tld(self, domain: str) -> str:
        """Return the public suffix of ``domain`` ("" if none is listed)."""
        tree = await self._get_tree()
        return match(tree, domain)

    async def split(self, domain: str) -> tuple[str, str]:
        """Split ``domain`` into (labels left of the suffix, suffix)."""
        labels = split_labels(domain)
        suffix = await self.get_tld(domain)
        if not suffix:
            return ".".join(labels), ""
        depth = suffix.count(".") + 1
        return ".".join(labels[:-depth]), suffix

    async def get_domain(self, domain: str) -> str:
        """Return the registrable domain: the suffix plus one more label.

        Returns "" when the domain has no listed suffix or is itself a suffix.
        """
        rest, suffix = await self.split(domain)
        if not suffix or not rest:
            return ""
        return f"{rest.rsplit('.', 1)[-1]}.{suffix}"

    async def refresh(self) -> RuleNode:
        """Fetch the list now, bypassing memory and disk."""
        return await self._load_from_network()

    async def aclose(self) -> None:
        """Wait for outstanding background refreshes and snapshot writes."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # Tiers

    async def _get_tree(self) -> RuleNode:
        now = time.time()
        record = self._record
        if record is not None and not record.is_expired(now):
            if record.is_stale(now):
                logger.debug("In-memory suffix tree is stale; refreshing in background")
                self._spawn(self._load_from_disk_or_network(), "memory refresh")
            return record.tree
        return await self._load_from_disk_or_network()

    async def _load_from_disk_or_network(self) -> RuleNode:
        age = await self.snapshot.age(time.time())
        if age is None:
            freshness = Freshness.INVALID
        else:
            freshness = Freshness.from_age(age, self.tts, self.ttl)
        logger.debug(f"Snapshot {self.snapshot.path} is {freshness}")

        if freshness is Freshness.INVALID:
            return await self._load_from_network()
        if freshness is Freshness.STALE:
            self._spawn(self._load_from_network(), "snapshot refresh")
        return await self._load_from_disk()

    async def _load_from_disk(self) -> RuleNode:
        previous = self._record
        try:
            tree = await self.snapshot.load()
        except CorruptSnapshotError as e:
            logger.warning(f"{e}; fetching list instead")
            return await self._load_from_network()

        # A concurrent network refresh may have landed while the file was read
        if self._record is previous:
            self._store(tree)
        return tree

    async def _load_from_network(self) -> RuleNode:
        tree = await fetch_rule_tree(self.url, timeout=self.fetch_timeout)
        self._store(tree)
        self._spawn(self._save_snapshot(tree), "snapshot write")
        return tree

    async def _save_snapshot(self, tree: RuleNode) -> None:
        try:
            await self.snapshot.save(tree)
        except FilesystemError as e:
            logger.debug(str(e))

    def _store(self, tree: RuleNode) -> None:
        self._record = TreeRecord.loaded_at(tree, time.time(), self.tts, self.ttl)

    def _spawn(self, coro: Coroutine[Any, Any, Any], label: str) -> None:
        task = asyncio.create_task(self._run_background(coro, label))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _run_background(self, coro: Coroutine[Any, Any, Any], label: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.warning(f"Background {label} failed: {e}")
