"""Domain normalization utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from ..cache import PublicSuffixData


def extract_hostname(value: str) -> str:
    """
    Normalize a domain/URL to a bare hostname.

    - Lowercase
    - Ignore scheme, credentials, port, path/query/fragment
    - Strip surrounding dots
    """
    raw = (value or "").strip()
    if not raw:
        return ""

    candidate = raw if "://" in raw else f"https://{raw}"
    try:
        parsed = urlparse(candidate)
        host = parsed.hostname or ""
    except ValueError:
        host = ""
    if not host:
        host = raw.split("/")[0].rsplit("@", 1)[-1].split(":")[0]
    return host.strip().lower().strip(".")


async def registered_domain(data: "PublicSuffixData", value: str) -> str:
    """Return the registrable domain for a host or URL ("" if there is none)."""
    host = extract_hostname(value)
    if not host:
        return ""
    return await data.get_domain(host)
