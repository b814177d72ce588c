"""
Version-ordered migration of persisted documents.

A document records the software version that wrote it. Loading it applies, in
increasing order, every transform introduced after that version, then stamps
the document with the running version.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Final, NamedTuple

from operator_config.config import STACK_VERSION
from operator_config.document import ROOT_KEY, VERSION_KEY, Document
from operator_config.types import UnsupportedVersionError

from .transforms import (
    convert_client_modes,
    merge_checkpoint_sync_urls,
    rename_legacy_sections,
    split_metrics_section,
)

logger = logging.getLogger(__name__)

_VERSION_PATTERN: Final = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:[-+].*)?$")


class Version(NamedTuple):
    """A `major.minor.patch` version; tuples order the way versions do."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


OLDEST_VERSION: Final = Version(0, 0, 0)
"""The version assumed for documents that carry none."""


def parse_version(text: str) -> Version:
    """
    Parse `v1.2.3` or `1.2.3`; pre-release and build suffixes are ignored.

    Raises:
        UnsupportedVersionError: If the text is not a version.
    """
    match = _VERSION_PATTERN.match(text)
    if match is None:
        raise UnsupportedVersionError(text, "not a semantic version")
    return Version(*(int(part) for part in match.groups()))


CURRENT_VERSION: Final = parse_version(STACK_VERSION)
"""The version of the running software."""

MIGRATIONS: Final[tuple[tuple[Version, Callable[[Document], None]], ...]] = (
    (Version(1, 2, 0), rename_legacy_sections),
    (Version(1, 3, 0), convert_client_modes),
    (Version(1, 4, 0), split_metrics_section),
    (Version(1, 5, 0), merge_checkpoint_sync_urls),
)
"""Transforms keyed by the version that introduced them, in increasing order."""


def document_version(document: Document) -> Version:
    """
    Read the version a document was written by.

    Raises:
        UnsupportedVersionError: If the recorded version is malformed.
    """
    text = document.get(ROOT_KEY, {}).get(VERSION_KEY, "")
    if not text:
        return OLDEST_VERSION
    return parse_version(text)


def migrate(document: Document) -> None:
    """
    Upgrade a document in place to the current format.

    A document already at the current version is left untouched, so migrating
    twice is the same as migrating once.

    Raises:
        UnsupportedVersionError: If the document is malformed or newer than this software.
    """
    version = document_version(document)
    if version > CURRENT_VERSION:
        raise UnsupportedVersionError(
            document[ROOT_KEY][VERSION_KEY], f"newer than the running version {CURRENT_VERSION}"
        )
    if version == CURRENT_VERSION:
        return

    for target, transform in MIGRATIONS:
        if version < target:
            logger.debug("Migrating settings from %s with %s", version, transform.__name__)
            transform(document)

    document.setdefault(ROOT_KEY, {})[VERSION_KEY] = f"v{STACK_VERSION}"
    logger.info("Upgraded settings from %s to %s", version, CURRENT_VERSION)
