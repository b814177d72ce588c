"""Pytest configuration and shared fixtures."""

import os

from hypothesis import settings

# Architecture and memory feed defaults at import time; pin them for reproducible tests.
os.environ.setdefault("OPERATOR_ARCH", "amd64")
os.environ.setdefault("OPERATOR_TOTAL_MEMORY_GB", "16")

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
