from pathlib import Path

import pytest

from sievedir.config import get_settings


@pytest.fixture(autouse=True)
def test_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SIEVEDIR", str(tmp_path / "sieve"))
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.delenv("SIEVE_MAX_NESTING", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sievedir(tmp_path: Path) -> Path:
    path = tmp_path / "sieve"
    path.mkdir()
    return path
