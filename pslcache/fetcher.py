"""Remote fetch of the Public Suffix List."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .constants import DEFAULT_FETCH_TIMEOUT_SECONDS
from .errors import TransportError
from .rules.parser import RuleStreamParser
from .rules.tree import RuleNode, build_tree

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


async def fetch_rule_tree(url: str, *, timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS) -> RuleNode:
    """Download the list at ``url`` and build a rule tree from the streamed body.

    Non-2xx responses, connection and read errors, timeouts and undecodable
    bodies all raise TransportError.
    """
    rules: list[list[str]] = []
    parser = RuleStreamParser()
    logger.info(f"Fetching public suffix list from {url}")
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise TransportError(url, "non-success response", status_code=resp.status)
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    rules.extend(parser.feed(chunk))
        rules.extend(parser.close())
    except asyncio.TimeoutError as e:
        raise TransportError(url, "timed out") from e
    except aiohttp.ClientError as e:
        raise TransportError(url, str(e) or type(e).__name__) from e
    except UnicodeDecodeError as e:
        raise TransportError(url, f"undecodable body: {e}") from e

    tree = build_tree(rules)
    logger.info(f"Fetched public suffix list from {url} ({tree.rule_count()} rule paths)")
    return tree
