"""Shared pytest fixtures for the console test suite."""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from console_api.settings import reload_settings
from tests.utils import TEST_SECRET_KEY


@pytest.fixture(autouse=True)
def _clean_console_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer ``CONSOLE_*`` variables out of every test."""

    for key in list(os.environ):
        if key.startswith("CONSOLE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONSOLE_SECRET_KEY", TEST_SECRET_KEY)
    reload_settings()
    yield
