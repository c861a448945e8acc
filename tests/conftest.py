from __future__ import annotations

import pytest

from proofsketch.config import CONFIG_ENV_VAR, get_settings


@pytest.fixture(autouse=True)
def _packaged_settings(monkeypatch):
    """Every test starts from the packaged defaults."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
