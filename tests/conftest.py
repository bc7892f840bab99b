# tests/conftest.py

import pytest

from concept_approacher.config.settings import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """
    Point every test at its own data directory and drop the cached Settings.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APPROACHER_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield
    reset_settings()
