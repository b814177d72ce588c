"""
Loading and saving settings files.

Settings are stored as YAML. Each load or save opens the file once and closes
it before returning. Saves go to a temporary file in the same directory that
then replaces the target, so a reader never sees a half-written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from operator_config.document import Document
from operator_config.root import RootConfig
from operator_config.types import DocumentError

logger = logging.getLogger(__name__)


def _scalar_text(value: Any) -> str:
    # Hand-edited files may hold unquoted booleans, numbers or empty values.
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def document_from_data(data: Any) -> Document:
    """
    Normalize parsed YAML into a settings document.

    Raises:
        DocumentError: If the data is not a mapping of mappings of scalars.
    """
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise DocumentError("Settings must be a mapping of sections")

    document: Document = {}
    for name, values in data.items():
        if values is None:
            values = {}
        if not isinstance(values, Mapping):
            raise DocumentError(f"Section '{name}' must be a mapping of settings")
        section: dict[str, str] = {}
        for key, value in values.items():
            if isinstance(value, (Mapping, list)):
                raise DocumentError(f"Setting '{name}.{key}' must be a single value")
            section[str(key)] = _scalar_text(value)
        document[str(name)] = section
    return document


def load_document(path: Path | str) -> Document | None:
    """
    Read a settings document from disk.

    Returns:
        The document, or None when the file does not exist.

    Raises:
        DocumentError: If the file is not valid YAML or not a settings document.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return None
    except yaml.YAMLError as e:
        raise DocumentError(f"Settings file {path} is not valid YAML: {e}") from e
    return document_from_data(data)


def load_from_file(path: Path | str) -> RootConfig | None:
    """
    Load a configuration from a settings file.

    The stack directory defaults to the folder holding the file; a directory
    recorded in the file takes precedence.

    Returns:
        The configuration, or None when the file does not exist.
    """
    path = Path(path)
    document = load_document(path)
    if document is None:
        logger.debug("No settings file at %s", path)
        return None
    cfg = RootConfig(str(path.parent))
    cfg.deserialize(document)
    logger.debug("Loaded settings from %s", path)
    return cfg


def save_document(document: Document, path: Path | str) -> None:
    """Write a settings document to disk, replacing any existing file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {name: dict(values) for name, values in document.items()}

    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as f:
        temporary = Path(f.name)
        try:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except BaseException:
            f.close()
            temporary.unlink(missing_ok=True)
            raise
    try:
        os.replace(temporary, path)
    except BaseException:
        temporary.unlink(missing_ok=True)
        raise


def save_to_file(cfg: RootConfig, path: Path | str) -> None:
    """Persist a configuration to a settings file."""
    save_document(cfg.serialize(), path)
    logger.debug("Saved settings to %s", path)
