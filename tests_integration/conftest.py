"""Integration test fixtures for live scraping.

These tests hit the real shop and are skipped unless HUZZLES_LIVE_TESTS=1,
so a normal ``pytest`` run stays offline.

Run with:  HUZZLES_LIVE_TESTS=1 pytest tests_integration/ -v
"""

import logging
import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from huzzle_tracker.catalog.reconcile import CatalogReconciler
from huzzle_tracker.config import load_settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.resolve()

load_dotenv(PROJECT_ROOT / ".env")


def pytest_collection_modifyitems(config, items):  # pylint: disable=unused-argument
    """Skip every live test unless explicitly enabled."""
    if os.getenv("HUZZLES_LIVE_TESTS") == "1":
        return
    skip_live = pytest.mark.skip(reason="set HUZZLES_LIVE_TESTS=1 to run live scraping tests")
    for item in items:
        item.add_marker(skip_live)


@pytest.fixture(scope="session")
def live_result():
    """Scrape the configured sources once per session."""
    settings = load_settings()
    logger.info("Scraping %d live sources", len(settings.sources))
    return CatalogReconciler.from_settings(settings).fetch_all(settings.sources)
