from __future__ import annotations

import os

import pytest

os.environ.setdefault("MJ_OTEL_ENABLED", "false")

TEST_SECRET = "test-access-token-secret"


@pytest.fixture(autouse=True)
def access_token_secret(monkeypatch: pytest.MonkeyPatch):
    from marketjobs.core.config import get_settings

    monkeypatch.setenv("MJ_ACCESS_TOKEN_SECRET", TEST_SECRET)
    get_settings.cache_clear()
    yield TEST_SECRET
    get_settings.cache_clear()
