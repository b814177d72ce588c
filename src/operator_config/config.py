"""
Global settings for the node-operator configuration engine.

This module contains process-level settings that apply across every section.
"""

import os
import platform

STACK_VERSION = "1.5.0"
"""The software version; documents are stamped with it as `v<STACK_VERSION>`."""

_SUPPORTED_ARCHITECTURES: list[str] = ["amd64", "arm64"]

_MACHINE_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def _detect_architecture() -> str:
    machine = platform.machine().lower()
    return _MACHINE_ALIASES.get(machine, machine)


OPERATOR_ARCH = os.environ.get("OPERATOR_ARCH", _detect_architecture()).lower()
"""The container architecture ('amd64' or 'arm64'). Selects architecture-specific image tags."""

if OPERATOR_ARCH not in _SUPPORTED_ARCHITECTURES:
    raise ValueError(
        f"Invalid OPERATOR_ARCH environment variable: '{OPERATOR_ARCH}'. "
        f"Supported values: {_SUPPORTED_ARCHITECTURES}"
    )


def _detect_total_memory_gb() -> int:
    try:
        total_bytes = os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        return 0
    return total_bytes // (1024**3)


TOTAL_MEMORY_GB = int(os.environ.get("OPERATOR_TOTAL_MEMORY_GB", _detect_total_memory_gb()))
"""
Total system memory in whole gigabytes, used by memory-aware defaults.

Zero means the amount could not be determined.
"""
