"""Merge freshly scraped catalog items with the statuses stored in the old table.

The fresh scrape decides which items exist and in what order (source order,
then page order; nothing is sorted).  The old table only contributes the
user-owned ``status`` column, matched by ``name``.  Items that exist only in
the old table are dropped, unless a source failed: its rows cannot be told
apart from stale ones, so on a partial run unmatched old rows are kept as they
were, after the fresh items.

Each source is fetched on its own worker thread.  A source that fails or
misses the overall deadline is recorded as a SourceFailure and the remaining
sources are still merged; only a run in which every source fails raises.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, wait

from pydantic import BaseModel, Field

from huzzle_tracker.catalog.scrape import Fetcher, build_session, make_fetcher, scrape_source
from huzzle_tracker.config import ScrapeSelectors, TrackerSettings
from huzzle_tracker.errors import CatalogFetchError, SourceFetchError
from huzzle_tracker.table.codec import ROW_WIDTH, rows_to_items
from huzzle_tracker.table.schema import CatalogItem

logger = logging.getLogger(__name__)


class SourceFailure(BaseModel):
    """One listing page that contributed nothing, and why."""

    url: str
    error: str


class ReconcileResult(BaseModel):
    """Merged items plus which sources they came from."""

    items: list[CatalogItem] = Field(default_factory=list)
    succeeded: list[str] = Field(default_factory=list)
    failures: list[SourceFailure] = Field(default_factory=list)
    retained: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when at least one source failed but others were merged."""
        return bool(self.failures) and bool(self.succeeded)


# ─── Status Index & Merge ─────────────────────────────────────────────────────


def build_status_index(rows: Sequence[Sequence[str]]) -> dict[str, str]:
    """Map name -> status for every well-formed data row (header skipped, last writer wins)."""
    index: dict[str, str] = {}
    for row in rows[1:]:
        if len(row) < ROW_WIDTH:
            continue
        index[row[2]] = row[4]
    return index


def merge_statuses(fresh: Sequence[CatalogItem], status_index: dict[str, str]) -> list[CatalogItem]:
    """Copy each fresh item with its stored status, or a blank one for new names."""
    return [item.model_copy(update={"status": status_index.get(item.name, "")}) for item in fresh]


def unmatched_rows(old_rows: Sequence[Sequence[str]], fresh: Sequence[CatalogItem]) -> list[CatalogItem]:
    """Old data rows whose name no fresh item carries, unchanged and in table order."""
    fresh_names = {item.name for item in fresh}
    return [item for item in rows_to_items(old_rows) if item.name not in fresh_names]


# ─── Reconciler ───────────────────────────────────────────────────────────────


class CatalogReconciler:
    """Fetches every source concurrently and merges the result with the old rows."""

    def __init__(
        self,
        sources: Sequence[str],
        fetch: Fetcher,
        selectors: ScrapeSelectors | None = None,
        max_workers: int = 6,
        fetch_deadline: float | None = None,
    ):
        self.sources = tuple(sources)
        self.fetch = fetch
        self.selectors = selectors or ScrapeSelectors()
        self.max_workers = max_workers
        self.fetch_deadline = fetch_deadline

    @classmethod
    def from_settings(cls, settings: TrackerSettings, fetch: Fetcher | None = None) -> "CatalogReconciler":
        """Build a reconciler from settings, creating an HTTP fetcher unless one is given."""
        if fetch is None:
            fetch = make_fetcher(build_session(settings.user_agent), settings.request_timeout)
        return cls(
            sources=settings.sources,
            fetch=fetch,
            selectors=settings.selectors,
            max_workers=settings.max_workers,
            fetch_deadline=settings.fetch_deadline,
        )

    def fetch_all(self, sources: Sequence[str]) -> ReconcileResult:
        """Scrape all sources concurrently; items keep source-list order."""
        result = ReconcileResult()
        if not sources:
            return result

        executor = ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(sources))))
        try:
            futures = [executor.submit(scrape_source, url, self.fetch, self.selectors) for url in sources]
            done, _ = wait(futures, timeout=self.fetch_deadline)

            for url, future in zip(sources, futures):
                if future not in done:
                    logger.warning("Source %s did not finish within %.0fs", url, self.fetch_deadline)
                    result.failures.append(SourceFailure(url=url, error=f"timed out after {self.fetch_deadline:g}s"))
                    continue
                try:
                    items = future.result()
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.warning("Source %s failed: %s", url, exc)
                    reason = exc.reason if isinstance(exc, SourceFetchError) else str(exc)
                    result.failures.append(SourceFailure(url=url, error=reason))
                    continue
                result.items.extend(items)
                result.succeeded.append(url)
        finally:
            # Do not block on stragglers that missed the deadline
            executor.shutdown(wait=False, cancel_futures=True)

        return result

    def reconcile(self, old_rows: Sequence[Sequence[str]], sources: Sequence[str] | None = None) -> ReconcileResult:
        """Fetch fresh items and carry each stored status forward by name.

        Raises CatalogFetchError when no source could be fetched, so the
        caller can leave the document untouched.
        """
        sources = self.sources if sources is None else tuple(sources)
        status_index = build_status_index(old_rows)
        logger.debug("Status index holds %d names", len(status_index))

        result = self.fetch_all(sources)
        if not result.succeeded:
            raise CatalogFetchError(result.failures)

        result.items = merge_statuses(result.items, status_index)
        carried = sum(1 for item in result.items if item.name in status_index)
        if result.failures:
            kept = unmatched_rows(old_rows, result.items)
            result.items.extend(kept)
            result.retained = [item.name for item in kept]
            if kept:
                logger.warning("Kept %d unmatched rows because some sources failed", len(kept))
        logger.info(
            "Reconciled %d items from %d/%d sources (%d matched an existing row)",
            len(result.items),
            len(result.succeeded),
            len(sources),
            carried,
        )
        return result
