from __future__ import annotations

from pathlib import Path

import pytest

from app import create_app
from tracker.config import Settings
from tracker.store import Store


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a per-test data file and static dir."""
    static_dir = tmp_path / "frontend"
    static_dir.mkdir()
    return Settings(
        host="127.0.0.1",
        port=0,
        debug=False,
        data_file=tmp_path / "data.json",
        static_dir=static_dir,
        log_level="DEBUG",
        log_file=None,
    )


@pytest.fixture()
def tracker_app(settings: Settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(tracker_app):
    return tracker_app.test_client()


@pytest.fixture()
def store(settings: Settings) -> Store:
    """Separate handle on the same file, for asserting persisted state."""
    return Store(settings.data_file)
