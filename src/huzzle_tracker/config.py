"""Shared configuration for the Hanayama Huzzles tracker.

Holds the file-format constants (region markers, table headers, image alt
convention), the default listing pages and CSS selectors, and the network
limits.  Values can be overridden through environment variables, loaded from
``ROOT / ".env"`` when present.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")


# ─── File-Format Contract ─────────────────────────────────────────────────────

# Existing documents depend on these exact strings; never change them.
START_MARKER = "<!-- Hanayama Huzzles start -->"
END_MARKER = "<!-- Hanayama Huzzles end -->"

HEADERS = ("Level", "Index", "Name", "Picture", "Status")

# Obsidian reads "|100" in an image alt as a 100px width hint
IMAGE_ALT = "|100"

# Number of images rendered in the Picture cell
PICTURES_PER_ROW = 2


# ─── Scrape Sources ───────────────────────────────────────────────────────────

_LISTING_BASE = "https://hanayama-toys.com/product-category/puzzles/huzzle"

DEFAULT_SOURCES = (
    f"{_LISTING_BASE}/level-1-fun/",
    f"{_LISTING_BASE}/level-2-easy/",
    f"{_LISTING_BASE}/level-3-normal/",
    f"{_LISTING_BASE}/level-4-hard/",
    f"{_LISTING_BASE}/level-5-expert/",
    f"{_LISTING_BASE}/level-6-grand-master/",
)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"


class ScrapeSelectors(BaseModel):
    """CSS selectors describing one product card on a listing page."""

    model_config = ConfigDict(frozen=True)

    product: str = "li.product"
    title: str = ".woocommerce-loop-product__title"
    thumbnail_image: str = "a.woocommerce-LoopProduct-link img"


class RegionMarkers(BaseModel):
    """The literal start/end strings that bound the managed region."""

    model_config = ConfigDict(frozen=True)

    start: str = START_MARKER
    end: str = END_MARKER


class TrackerSettings(BaseModel):
    """Everything one reconciliation run needs, resolved up front."""

    model_config = ConfigDict(frozen=True)

    sources: tuple[str, ...] = DEFAULT_SOURCES
    selectors: ScrapeSelectors = Field(default_factory=ScrapeSelectors)
    markers: RegionMarkers = Field(default_factory=RegionMarkers)
    headers: tuple[str, ...] = HEADERS
    request_timeout: float = Field(default=20.0, gt=0)
    fetch_deadline: float = Field(default=60.0, gt=0)
    max_workers: int = Field(default=6, ge=1)
    user_agent: str = DEFAULT_USER_AGENT


def _split_sources(raw: str) -> tuple[str, ...]:
    """Split a comma-separated URL list, dropping blanks."""
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_settings(**overrides) -> TrackerSettings:
    """Build TrackerSettings from HUZZLES_* environment variables plus explicit overrides."""
    values: dict = {}

    raw_sources = os.getenv("HUZZLES_SOURCES", "")
    if raw_sources.strip():
        values["sources"] = _split_sources(raw_sources)

    env_map = {
        "request_timeout": "HUZZLES_REQUEST_TIMEOUT",
        "fetch_deadline": "HUZZLES_FETCH_DEADLINE",
        "max_workers": "HUZZLES_MAX_WORKERS",
        "user_agent": "HUZZLES_USER_AGENT",
    }
    for field_name, env_name in env_map.items():
        raw = os.getenv(env_name)
        if raw:
            values[field_name] = raw

    values.update({key: val for key, val in overrides.items() if val is not None})
    return TrackerSettings(**values)
