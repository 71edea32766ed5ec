"""Conversion between markdown pipe tables and catalog rows.

Decoding goes through markdown-it-py with the GFM table rule enabled, so the
region is read the way a markdown renderer would read it: escaped pipes stay
inside their cell, inline markup collapses to its text, and images are
re-emitted as literal ``![alt](url)`` so the picture cell can be re-scanned.

Encoding renders the fixed five-column layout (Level, Index, Name, Picture,
Status) as a pipe table whose cells re-parse to exactly the text they were
built from.
"""

import logging
from collections.abc import Callable, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token

from huzzle_tracker.config import HEADERS, IMAGE_ALT, PICTURES_PER_ROW
from huzzle_tracker.table.patterns import CELL_SPECIAL_RE, IMAGE_LINK_RE, NEEDS_ANGLE_BRACKETS_RE
from huzzle_tracker.table.schema import CatalogItem

logger = logging.getLogger(__name__)

# Cells a well-formed data row must have (level, index, name, picture, status)
ROW_WIDTH = 5


# ─── Cell Helpers ─────────────────────────────────────────────────────────────


def escape_cell(text: str) -> str:
    """Backslash-escape characters that would change how a table cell parses."""
    return CELL_SPECIAL_RE.sub(r"\\\1", text.replace("\n", " "))


def _format_destination(url: str) -> str:
    """Wrap a link destination in <...> when it would not survive bare."""
    if NEEDS_ANGLE_BRACKETS_RE.search(url):
        return f"<{url}>"
    return url


def _escape_destination(url: str) -> str:
    """Destination as written inside a table cell, where a bare pipe would split the cell."""
    return _format_destination(url).replace("|", "\\|")


def image_markdown(alt: str, url: str) -> str:
    """Literal markdown image syntax, unescaped (as it appears in decoded cell text)."""
    return f"![{alt}]({_format_destination(url)})"


def extract_image_links(cell: str) -> list[str]:
    """Return every image URL in a decoded cell, left to right."""
    return [match.group("angled") if match.group("angled") is not None else match.group("bare") for match in IMAGE_LINK_RE.finditer(cell)]


def _flatten_inline(children: list[Token], unnormalize: Callable[[str], str]) -> str:
    """Concatenate a cell's inline tokens into one string.

    markdown-it percent-encodes image destinations; ``unnormalize`` turns them
    back into the text that was written.
    """
    parts: list[str] = []
    for child in children:
        if child.type == "image":
            alt = "".join(grandchild.content for grandchild in child.children or []) or child.content
            parts.append(image_markdown(alt, unnormalize(str(child.attrGet("src") or ""))))
        else:
            # text, text_special, code_inline, html_inline; *_open/*_close carry no content
            parts.append(child.content)
    return "".join(parts)


# ─── Row Recovery ─────────────────────────────────────────────────────────────


def rows_to_items(rows: Sequence[Sequence[str]]) -> list[CatalogItem]:
    """Rebuild CatalogItems from decoded rows, skipping the header and short rows."""
    items: list[CatalogItem] = []
    for row_idx, row in enumerate(rows[1:], start=1):
        if len(row) < ROW_WIDTH:
            logger.debug("Skipping row %d: %d cells, expected %d", row_idx, len(row), ROW_WIDTH)
            continue
        items.append(
            CatalogItem(
                level=row[0],
                index=row[1],
                name=row[2],
                image_links=extract_image_links(row[3]),
                status=row[4],
            )
        )
    return items


# ─── Codec ────────────────────────────────────────────────────────────────────


class TableCodec:
    """Bidirectional markdown table <-> rows conversion for a fixed header set."""

    def __init__(self, headers: Sequence[str] = HEADERS, image_alt: str = IMAGE_ALT):
        self.headers = tuple(headers)
        self.image_alt = image_alt
        self._md = MarkdownIt("commonmark").enable("table")

    def decode(self, text: str) -> list[list[str]]:
        """Parse the first table in ``text`` into rows of cell strings, header first.

        Returns an empty list when the text holds no table.
        """
        rows: list[list[str]] = []
        current: list[str] = []
        in_table = False

        for token in self._md.parse(text):
            if token.type == "table_open":
                in_table = True
            elif not in_table:
                continue
            elif token.type == "table_close":
                break
            elif token.type == "tr_open":
                current = []
            elif token.type == "inline":
                current.append(_flatten_inline(token.children or [], self._md.normalizeLinkText))
            elif token.type == "tr_close":
                rows.append(current)

        logger.debug("Decoded table with %d rows", len(rows))
        return rows

    def _picture_cell(self, image_links: Sequence[str]) -> str:
        """Up to two images separated by a single space; missing images are left out."""
        alt = escape_cell(self.image_alt)
        images = [f"![{alt}]({_escape_destination(url)})" for url in image_links[:PICTURES_PER_ROW]]
        return " ".join(images)

    def encode(self, items: Sequence[CatalogItem]) -> str:
        """Render items as a pipe table under the configured headers (no trailing newline)."""
        lines: list[str] = []

        # Header row + separator
        lines.append("| " + " | ".join(escape_cell(header) for header in self.headers) + " |")
        lines.append("| " + " | ".join(["---"] * len(self.headers)) + " |")

        # Data rows
        for item in items:
            cells = [
                escape_cell(item.level),
                escape_cell(item.index),
                escape_cell(item.name),
                self._picture_cell(item.image_links),
                escape_cell(item.status),
            ]
            lines.append("| " + " | ".join(cells) + " |")

        return "\n".join(lines)
