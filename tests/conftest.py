"""Shared pytest fixtures and configuration for the verbkit test suite.

Guidelines
----------
* Async code is driven with ``asyncio.run`` inside plain tests.
* Tests never install real signal handlers; signal wiring is patched.
* Tests must not leave logging handlers behind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
