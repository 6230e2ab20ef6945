"""Shared fixtures for songwatch tests."""

from unittest.mock import AsyncMock

import pytest

from songwatch.config import SyncConfig


@pytest.fixture()
def sync_config(tmp_path):
    """A config watching a temporary library root."""
    library = tmp_path / "lib"
    library.mkdir()
    return SyncConfig(base_url="http://library.local/api/sync", watch_dir=library)


@pytest.fixture()
def notifier():
    """A notifier whose send() succeeds and records payloads."""
    mock = AsyncMock()
    mock.send = AsyncMock(return_value=None)
    return mock
