"""Shared fixtures: isolate tests from real API keys and the user's store."""

import pytest

from genstudio.keys import PROVIDERS


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for info in PROVIDERS.values():
        monkeypatch.delenv(info.env_var, raising=False)
    monkeypatch.delenv("GENSTUDIO_CONFIG", raising=False)
    monkeypatch.setenv("GENSTUDIO_STORE", str(tmp_path / "store.json"))
