"""Preview what the scraper extracts from listing pages, without touching any note.

Useful after the shop changes its page layout: run it against one level page
and check that titles still parse and thumbnails are still found.

Usage:
    source .venv/bin/activate
    python scripts/preview_catalog.py                      # configured sources
    python scripts/preview_catalog.py https://.../level-3-normal/
"""

import logging
import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(ROOT / "src"))

from huzzle_tracker.catalog.reconcile import CatalogReconciler  # pylint: disable=wrong-import-position
from huzzle_tracker.config import load_settings  # pylint: disable=wrong-import-position

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def main():
    """Fetch the sources and print one line per extracted item."""
    settings = load_settings(sources=tuple(sys.argv[1:]) or None)
    reconciler = CatalogReconciler.from_settings(settings)
    result = reconciler.fetch_all(settings.sources)

    print(f"{'Level':>5} | {'Index':>5} | {'Imgs':>4} | Name")
    print("-" * 60)
    for item in result.items:
        print(f"{item.level:>5} | {item.index:>5} | {len(item.image_links):>4} | {item.name}")

    print(f"\n{len(result.items)} items from {len(result.succeeded)}/{len(settings.sources)} sources")
    for failure in result.failures:
        logger.warning("FAILED %s: %s", failure.url, failure.error)


if __name__ == "__main__":
    main()
