"""Shared fixtures for configuration engine tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from operator_config import RootConfig


@pytest.fixture
def stack_dir(tmp_path: Path) -> Path:
    """A scratch stack directory."""
    return tmp_path / "rocketpool"


@pytest.fixture
def cfg(stack_dir: Path) -> RootConfig:
    """A fresh container-mode configuration at its defaults."""
    return RootConfig(str(stack_dir))


@pytest.fixture
def native_cfg(stack_dir: Path) -> RootConfig:
    """A fresh native-mode configuration at its defaults."""
    return RootConfig(str(stack_dir), is_native_mode=True)
