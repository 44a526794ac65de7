"""Helper utilities for pslcache."""

from .domains import extract_hostname, registered_domain

__all__ = ["extract_hostname", "registered_domain"]
