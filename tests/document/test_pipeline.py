"""End-to-end tests for reconciling a document's managed table.

The fetcher is faked, so these exercise region location, table decoding,
status carry-over, encoding and splicing together without a network.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest

from huzzle_tracker.config import END_MARKER, START_MARKER, TrackerSettings
from huzzle_tracker.document.pipeline import DocumentUpdater, update_document
from huzzle_tracker.errors import CatalogFetchError, SourceFetchError
from huzzle_tracker.table.codec import TableCodec

LEVEL_1 = "https://shop.example/level-1/"
LEVEL_2 = "https://shop.example/level-2/"

LEVEL_1_PAGE = (
    '<ul class="products">'
    '<li class="product"><a class="woocommerce-LoopProduct-link">'
    '<img src="https://cdn.example/dot-1.jpg"><img src="https://cdn.example/dot-2.jpg">'
    '<h2 class="woocommerce-loop-product__title">Huzzle 1-1 Dot</h2></a></li>'
    '<li class="product"><a class="woocommerce-LoopProduct-link">'
    '<img src="https://cdn.example/cake.jpg">'
    '<h2 class="woocommerce-loop-product__title">Huzzle 1-2 Cake</h2></a></li>'
    '<li class="product"><a class="woocommerce-LoopProduct-link">'
    '<h2 class="woocommerce-loop-product__title">Gift Card</h2></a></li>'
    "</ul>"
)


LEVEL_2_PAGE = (
    '<li class="product"><a class="woocommerce-LoopProduct-link">'
    '<img src="https://cdn.example/ring.jpg">'
    '<h2 class="woocommerce-loop-product__title">Huzzle 2-1 Ring</h2></a></li>'
)


def fetch_both(url: str) -> str:
    pages = {LEVEL_1: LEVEL_1_PAGE, LEVEL_2: LEVEL_2_PAGE}
    if url not in pages:
        raise SourceFetchError(url, "404 Client Error")
    return pages[url]


def fetch_level_1(url: str) -> str:
    if url != LEVEL_1:
        raise SourceFetchError(url, "404 Client Error")
    return LEVEL_1_PAGE


def fail_everything(url: str) -> str:
    raise SourceFetchError(url, "connection refused")


@pytest.fixture
def settings() -> TrackerSettings:
    return TrackerSettings(sources=(LEVEL_1,), fetch_deadline=5)


def table_rows(document: str) -> list[list[str]]:
    body = document.split(START_MARKER, 1)[1].split(END_MARKER, 1)[0]
    return TableCodec().decode(body)


class TestNewRegion:

    def test_region_appended_and_original_untouched(self, settings):
        document = "# My puzzles\n\nNotes about solving."
        result = DocumentUpdater(settings, fetch_level_1).update(document)

        assert result.created_region is True
        assert result.content.startswith(document + "\n\n" + START_MARKER + "\n\n| Level |")
        assert result.content.endswith("\n\n" + END_MARKER)

    def test_new_items_start_with_blank_status(self, settings):
        content = update_document("", settings, fetch_level_1)
        rows = table_rows(content)
        assert rows[0] == ["Level", "Index", "Name", "Picture", "Status"]
        assert rows[1] == ["1", "1", "Dot", "![|100](https://cdn.example/dot-1.jpg) ![|100](https://cdn.example/dot-2.jpg)", ""]
        assert rows[2] == ["1", "2", "Cake", "![|100](https://cdn.example/cake.jpg)", ""]
        assert len(rows) == 3


class TestExistingRegion:

    def test_only_region_replaced(self, settings):
        document = f"before\n{START_MARKER}\nOLD\n{END_MARKER}\nafter"
        content = update_document(document, settings, fetch_level_1)
        assert content.startswith(f"before\n{START_MARKER}\n\n")
        assert content.endswith(f"\n\n{END_MARKER}\nafter")
        assert "OLD" not in content

    def test_status_survives_and_stale_rows_dropped(self, settings):
        old_table = "\n".join(
            [
                "| Level | Index | Name | Picture | Status |",
                "| --- | --- | --- | --- | --- |",
                "| 1 | 1 | Dot | ![\\|100](https://old.example/dot.jpg) | solved 2024-03-01 |",
                "| 1 | 7 | Retired Puzzle |  | never solved |",
            ]
        )
        document = f"intro\n\n{START_MARKER}\n\n{old_table}\n\n{END_MARKER}\n\noutro"
        result = DocumentUpdater(settings, fetch_level_1).update(document)
        rows = table_rows(result.content)

        assert result.created_region is False
        assert [row[2] for row in rows[1:]] == ["Dot", "Cake"]
        assert rows[1][4] == "solved 2024-03-01"
        assert "https://cdn.example/dot-1.jpg" in rows[1][3]
        assert rows[2][4] == ""
        assert result.content.startswith("intro\n\n")
        assert result.content.endswith("\n\noutro")

    def test_malformed_row_does_not_crash(self, settings):
        old_table = "| Level | Index | Name |\n| --- | --- | --- |\n| 1 | 1 | Dot |"
        document = f"{START_MARKER}\n\n{old_table}\n\n{END_MARKER}"
        rows = table_rows(update_document(document, settings, fetch_level_1))
        assert rows[1][2] == "Dot"
        assert rows[1][4] == ""

    def test_second_run_is_stable(self, settings):
        updater = DocumentUpdater(settings, fetch_level_1)
        first = updater.update("notes").content
        assert updater.update(first).content == first


class TestFailures:

    def test_total_failure_raises_and_returns_nothing(self, settings):
        with pytest.raises(CatalogFetchError):
            update_document("notes", settings, fail_everything)

    def test_partial_failure_still_updates(self):
        settings = TrackerSettings(sources=(LEVEL_1, LEVEL_2), fetch_deadline=5)
        result = DocumentUpdater(settings, fetch_level_1).update("notes")
        assert result.reconcile.partial is True
        assert [failure.url for failure in result.reconcile.failures] == [LEVEL_2]
        assert [row[2] for row in table_rows(result.content)[1:]] == ["Dot", "Cake"]

    def test_status_survives_a_failed_source(self):
        settings = TrackerSettings(sources=(LEVEL_1, LEVEL_2), fetch_deadline=5)
        ring_row = "| 2 | 1 | Ring | ![\\|100](https://cdn.example/ring.jpg) |  |"
        first = update_document("notes", settings, fetch_both)
        assert ring_row in first
        annotated = first.replace(ring_row, ring_row[: -len("  |")] + " solved |")

        # Level 2 page is down: Dot and Cake refresh, the Ring row is kept as it was
        partial = DocumentUpdater(settings, fetch_level_1).update(annotated)
        assert partial.reconcile.retained == ["Ring"]
        assert [(row[2], row[4]) for row in table_rows(partial.content)[1:]] == [("Dot", ""), ("Cake", ""), ("Ring", "solved")]

        recovered = update_document(partial.content, settings, fetch_both)
        assert [(row[2], row[4]) for row in table_rows(recovered)[1:]] == [("Dot", ""), ("Cake", ""), ("Ring", "solved")]
