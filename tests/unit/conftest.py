"""Shared test fixtures."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from dropbox_backup.config import Config


def make_config(tmp_path: Path, **overrides: Any) -> Config:
    """Return a Config whose local paths all live under tmp_path."""
    values: dict[str, Any] = {
        "upload_url": "https://content.example.com/2/files/upload",
        "refresh_url": "https://api.example.com/oauth2/token",
        "client_id": "app-key",
        "client_secret": "app-secret",
        "refresh_token": "long-lived-refresh",
        "remote_dir": "/Backups",
        "ledger_path": tmp_path / "state" / "uploaded.log",
        "archive_dir": tmp_path / "archive",
        "source_dir": tmp_path / "source",
        "extensions": frozenset({"txt"}),
        "token_cache_path": tmp_path / "state" / "short_token.txt",
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config with an existing, empty source directory."""
    cfg = make_config(tmp_path)
    cfg.source_dir.mkdir()
    return cfg


@pytest.fixture(autouse=True)
def _quiet_logger() -> Iterator[None]:
    """Drop sinks added by tests (e.g. through the CLI callback)."""
    yield
    logger.remove()
