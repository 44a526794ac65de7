"""Exception types raised by pslcache."""

from typing import Optional


class PublicSuffixError(Exception):
    """Base exception for pslcache errors."""

    pass


class TransportError(PublicSuffixError):
    """Fetching the suffix list failed or returned a non-success status."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"Received {status_code} error from {url}: {message}")
        else:
            super().__init__(f"Failed to fetch {url}: {message}")


FetchError = TransportError


class CorruptSnapshotError(PublicSuffixError):
    """The on-disk snapshot could not be read or parsed."""

    def __init__(self, path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Unusable snapshot at {path}: {message}")


class FilesystemError(PublicSuffixError):
    """Writing the on-disk snapshot failed."""

    def __init__(self, path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Snapshot write failed for {path}: {message}")
