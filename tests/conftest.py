"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")


@pytest.fixture(autouse=True)
def _isolate_tracker_env(monkeypatch):
    """Keep a developer's HUZZLES_* overrides from leaking into unit tests."""
    for name in ("HUZZLES_SOURCES", "HUZZLES_REQUEST_TIMEOUT", "HUZZLES_FETCH_DEADLINE", "HUZZLES_MAX_WORKERS", "HUZZLES_USER_AGENT"):
        monkeypatch.delenv(name, raising=False)
