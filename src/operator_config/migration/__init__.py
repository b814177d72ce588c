"""Upgrades of persisted documents written by older software versions."""

from .engine import MIGRATIONS, Version, document_version, migrate, parse_version

__all__ = [
    "MIGRATIONS",
    "Version",
    "document_version",
    "migrate",
    "parse_version",
]
