"""
Layout of the persisted settings document.

A document is a two-level mapping of strings: section name to parameter id to
value. The reserved root entry holds the top-level parameters and the metadata
below.
"""

from collections.abc import MutableMapping
from typing import Final

Document = MutableMapping[str, MutableMapping[str, str]]
"""A persisted settings document."""

ROOT_KEY: Final = "root"
"""Document key of the root parameters and metadata; never used by a section."""

DIRECTORY_KEY: Final = "rpDir"
"""Root metadata: the stack's base directory."""

NATIVE_MODE_KEY: Final = "isNative"
"""Root metadata: `true` when the stack runs without containers."""

VERSION_KEY: Final = "version"
"""Root metadata: the software version that wrote the document, as `v<semver>`."""
