# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from prioritizze.config import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings built directly rather than from the environment,
    to keep unit tests isolated and deterministic.
    """
    return Settings(
        app_name="prioritizze-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_base_url="http://backend.test/",
        api_token="test-token",
        api_email=None,
        api_password=None,
        http_connect_timeout_seconds=1.0,
        http_read_timeout_seconds=1.0,
        reset_interval_seconds=3600,
        timezone="UTC",
    )
