"""Single entry point: reconcile the managed table inside a document's text.

Pipeline:
  1. locate the marker-delimited region (RegionLocator)
  2. decode its table into rows (TableCodec)
  3. fetch fresh items and carry statuses forward by name (CatalogReconciler)
  4. encode the merged items and splice them back (TableCodec, RegionLocator)

The input text is never mutated; a new document string is returned.  When no
source can be fetched, CatalogFetchError propagates and no new text exists.
"""

import logging

from pydantic import BaseModel

from huzzle_tracker.catalog.reconcile import CatalogReconciler, ReconcileResult
from huzzle_tracker.catalog.scrape import Fetcher
from huzzle_tracker.config import TrackerSettings, load_settings
from huzzle_tracker.document.region import RegionLocator
from huzzle_tracker.table.codec import TableCodec

logger = logging.getLogger(__name__)


class UpdateResult(BaseModel):
    """New document text plus the reconciliation report behind it."""

    content: str
    created_region: bool
    reconcile: ReconcileResult


class DocumentUpdater:
    """Wires the locator, codec and reconciler together from one TrackerSettings."""

    def __init__(self, settings: TrackerSettings | None = None, fetch: Fetcher | None = None):
        self.settings = settings or load_settings()
        self.locator = RegionLocator(self.settings.markers)
        self.codec = TableCodec(self.settings.headers)
        self.reconciler = CatalogReconciler.from_settings(self.settings, fetch=fetch)

    def update(self, content: str) -> UpdateResult:
        """Return the document with its region rebuilt from a fresh scrape."""
        region = self.locator.locate(content)
        old_rows = self.codec.decode(region.body) if region is not None else []
        logger.debug("Old table has %d rows", len(old_rows))

        result = self.reconciler.reconcile(old_rows)
        table = self.codec.encode(result.items)
        return UpdateResult(
            content=self.locator.splice(content, table),
            created_region=region is None,
            reconcile=result,
        )


def update_document(content: str, settings: TrackerSettings | None = None, fetch: Fetcher | None = None) -> str:
    """Convenience wrapper returning only the new document text."""
    return DocumentUpdater(settings, fetch).update(content).content
