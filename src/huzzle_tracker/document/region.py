"""Locate and rewrite the marker-delimited region inside a document.

The region is the first start marker followed by the first end marker after
it.  Everything outside that span is returned byte for byte.
"""

import logging
from dataclasses import dataclass

from huzzle_tracker.config import RegionMarkers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """A located region: text before the start marker, between the markers, and after the end marker."""

    prefix: str
    body: str
    suffix: str


class RegionLocator:
    """Finds, renders and splices the managed region for one pair of markers."""

    def __init__(self, markers: RegionMarkers | None = None):
        self.markers = markers or RegionMarkers()

    def locate(self, document: str) -> Region | None:
        """Return the first start...end region, or None when the document has none."""
        start = document.find(self.markers.start)
        if start == -1:
            return None
        body_start = start + len(self.markers.start)
        end = document.find(self.markers.end, body_start)
        if end == -1:
            return None
        return Region(
            prefix=document[:start],
            body=document[body_start:end],
            suffix=document[end + len(self.markers.end) :],
        )

    def render_block(self, table: str) -> str:
        """Markers around the table, each separated from it by a blank line."""
        return f"{self.markers.start}\n\n{table}\n\n{self.markers.end}"

    def splice(self, document: str, table: str) -> str:
        """Replace the existing region with ``table``, or append a new region after the content."""
        block = self.render_block(table)
        region = self.locate(document)
        if region is not None:
            logger.info("Replacing existing region (%d chars)", len(region.body))
            return region.prefix + block + region.suffix

        logger.info("No region markers found, appending a new region")
        if not document:
            return block
        return f"{document}\n\n{block}"
