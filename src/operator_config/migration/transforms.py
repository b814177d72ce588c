"""
Document transforms, one per format change.

Transforms work on the raw two-level mapping only. They must not rely on the
current parameter schema, because the document they receive predates it. Each
one leaves keys it does not recognize alone and lets values already present in
the new layout win over legacy ones.
"""

import logging
from typing import Final

from operator_config.document import NATIVE_MODE_KEY, ROOT_KEY, Document

logger = logging.getLogger(__name__)

_TRUE_STRINGS: Final = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS: Final = frozenset({"0", "f", "F", "FALSE", "false", "False"})

LEGACY_SECTION_NAMES: Final = {
    "execution": "executionCommon",
    "fallbackExecution": "fallbackExecutionCommon",
    "consensus": "consensusCommon",
}
"""Sections renamed when the common client settings got their own sections."""

LEGACY_MODE_FLAGS: Final = {
    "useExternalExecutionClient": "executionClientMode",
    "useExternalConsensusClient": "consensusClientMode",
}
"""Root booleans replaced by local/external mode choices."""

LEGACY_METRICS_KEYS: Final = {
    "grafanaPort": ("grafana", "port"),
    "grafanaContainerTag": ("grafana", "containerTag"),
    "prometheusPort": ("prometheus", "port"),
    "prometheusOpenPort": ("prometheus", "openPort"),
    "prometheusContainerTag": ("prometheus", "containerTag"),
    "exporterRootFs": ("exporter", "enableRootFs"),
    "exporterContainerTag": ("exporter", "containerTag"),
}
"""Where each setting of the single legacy `metrics` section moved."""

CHECKPOINT_SYNC_CLIENTS: Final = ("lighthouse", "prysm", "teku")
"""Consensus client sections that used to carry their own checkpoint sync URL."""


def _parse_legacy_bool(text: str) -> bool | None:
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def rename_legacy_sections(document: Document) -> None:
    """Move the old common client sections to their current names."""
    for old_name, new_name in LEGACY_SECTION_NAMES.items():
        legacy = document.pop(old_name, None)
        if legacy is None:
            continue
        merged = dict(legacy)
        merged.update(document.get(new_name, {}))
        document[new_name] = merged
        logger.debug("Renamed section %s to %s", old_name, new_name)


def convert_client_modes(document: Document) -> None:
    """
    Replace the external-client booleans with mode choices.

    An unreadable flag is dropped so the mode falls back to its default.
    Documents from before native mode existed are marked as container installs.
    """
    root = document.setdefault(ROOT_KEY, {})
    for flag, mode_id in LEGACY_MODE_FLAGS.items():
        text = root.pop(flag, None)
        if text is None or mode_id in root:
            continue
        use_external = _parse_legacy_bool(text)
        if use_external is None:
            logger.debug("Dropped unreadable %s value %r", flag, text)
            continue
        root[mode_id] = "external" if use_external else "local"
    root.setdefault(NATIVE_MODE_KEY, "false")


def split_metrics_section(document: Document) -> None:
    """Distribute the legacy `metrics` section over the three metrics service sections."""
    legacy = document.pop("metrics", None)
    if legacy is None:
        return
    for key, text in legacy.items():
        target = LEGACY_METRICS_KEYS.get(key)
        if target is None:
            logger.debug("Dropped obsolete metrics setting %s", key)
            continue
        section_name, parameter_id = target
        document.setdefault(section_name, {}).setdefault(parameter_id, text)


def merge_checkpoint_sync_urls(document: Document) -> None:
    """
    Collapse the per-client checkpoint sync URLs into the common consensus settings.

    A URL already in the common settings wins; otherwise the URL of the selected
    consensus client is kept. The per-client entries are removed either way.
    """
    per_client: dict[str, str] = {}
    for client in CHECKPOINT_SYNC_CLIENTS:
        section = document.get(client)
        if section is not None and "checkpointSyncUrl" in section:
            per_client[client] = section.pop("checkpointSyncUrl")
    if not per_client:
        return

    common = document.setdefault("consensusCommon", {})
    if common.get("checkpointSyncUrl"):
        return
    selected = document.get(ROOT_KEY, {}).get("consensusClient", "")
    url = per_client.get(selected, "")
    if url:
        common["checkpointSyncUrl"] = url
