"""Command-line lookup of public suffixes.

Usage:
    pslcache example.co.uk https://www.example.com/path
    pslcache --refresh example.co.uk
    pslcache --env-file /etc/pslcache.env example.co.uk
"""

import argparse
import asyncio
import logging
import os
import sys

from .cache import PublicSuffixData
from .config import load_config, validate_config
from .errors import TransportError
from .utils.domains import extract_hostname

logger = logging.getLogger("pslcache")


def _load_env_file(path: str) -> None:
    """Load environment variables from a .env-style file."""
    from dotenv import dotenv_values

    values = dotenv_values(path)
    for key, value in values.items():
        if value is None:
            continue
        os.environ[key] = value


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pslcache", description="Look up public suffixes of domains.")
    parser.add_argument("domains", nargs="+", help="Domains or URLs to resolve")
    parser.add_argument("--refresh", action="store_true", help="Fetch the list before resolving")
    parser.add_argument("--env-file", help="Load environment variables from this file first")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


async def run_lookup(data: PublicSuffixData, domains: list[str], refresh: bool = False) -> list[tuple[str, str, str]]:
    """Resolve each domain to (host, suffix, registrable domain)."""
    async with data:
        if refresh:
            await data.refresh()
        rows = []
        for value in domains:
            host = extract_hostname(value)
            rows.append((host, await data.get_tld(host), await data.get_domain(host)))
        return rows


def main(argv: list[str] | None = None) -> int:
    """Entry point."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    if args.env_file:
        _load_env_file(args.env_file)

    config = load_config()
    validation_errors = validate_config(config)
    if validation_errors:
        for err in validation_errors:
            logger.error(err)
        return 1

    data = PublicSuffixData.from_config(config)
    try:
        rows = asyncio.run(run_lookup(data, args.domains, refresh=args.refresh))
    except TransportError as e:
        logger.error(str(e))
        return 2

    for host, suffix, registrable in rows:
        print(f"{host}\t{suffix}\t{registrable}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
