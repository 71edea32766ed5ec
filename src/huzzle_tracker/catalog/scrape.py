"""Fetch listing pages and extract CatalogItems from their product cards.

Extraction is best effort: a product whose title does not look like
``<word> <level>-<index> <name>`` is dropped, and a page whose selectors
match nothing yields no items.  Neither case raises.
"""

import logging
import re
from collections.abc import Callable
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from huzzle_tracker.config import DEFAULT_USER_AGENT, ScrapeSelectors
from huzzle_tracker.errors import SourceFetchError
from huzzle_tracker.table.schema import CatalogItem

logger = logging.getLogger(__name__)

# Listing title such as "Huzzle 3-12 Twisty Gem": a word, then level-index, then the name
TITLE_RE = re.compile(r"\w+ (?P<level>\d+)-(?P<index>\d+) (?P<name>.*)")

# fetch(url) -> page text
Fetcher = Callable[[str], str]


# ─── HTTP ─────────────────────────────────────────────────────────────────────


def build_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """Create a requests session with the tracker's default headers."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def make_fetcher(session: requests.Session, timeout: float) -> Fetcher:
    """Return a fetch(url) -> text callable bound to a session and per-request timeout.

    Any transport error or non-2xx status is raised as SourceFetchError.
    """

    def fetch(url: str) -> str:
        try:
            response = session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SourceFetchError(url, str(exc)) from exc
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text

    return fetch


# ─── HTML ─────────────────────────────────────────────────────────────────────


def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML text into a queryable tree."""
    return BeautifulSoup(html, "html.parser")


def parse_title(title: str) -> tuple[str, str, str] | None:
    """Split a product title into (level, index, name), or None when it does not match."""
    match = TITLE_RE.search(title)
    if match is None:
        return None
    return match.group("level"), match.group("index"), match.group("name").strip()


def _image_sources(product: Tag, selector: str, base_url: str) -> list[str]:
    """Image URLs under the product's thumbnail links, in document order."""
    links: list[str] = []
    for img in product.select(selector):
        src = str(img.get("src") or "")
        # Lazy-loaded thumbnails carry a data: placeholder in src and the real URL in data-src
        if not src or src.startswith("data:"):
            src = str(img.get("data-src") or "")
        if not src or src.startswith("data:"):
            continue
        links.append(urljoin(base_url, src))
    return links


def extract_items(html: str, source_url: str, selectors: ScrapeSelectors | None = None) -> list[CatalogItem]:
    """Extract every well-formed product on one listing page, in page order."""
    selectors = selectors or ScrapeSelectors()
    soup = parse_html(html)

    products = soup.select(selectors.product)
    if not products:
        logger.warning("No products matched '%s' on %s", selectors.product, source_url)
        return []

    items: list[CatalogItem] = []
    for product in products:
        title_el = product.select_one(selectors.title)
        title = title_el.get_text().strip() if title_el is not None else ""
        parsed = parse_title(title)
        if parsed is None:
            logger.debug("Dropping product with unrecognised title %r on %s", title, source_url)
            continue

        level, index, name = parsed
        items.append(
            CatalogItem(
                level=level,
                index=index,
                name=name,
                image_links=_image_sources(product, selectors.thumbnail_image, source_url),
            )
        )

    logger.info("Extracted %d/%d products from %s", len(items), len(products), source_url)
    return items


def scrape_source(url: str, fetch: Fetcher, selectors: ScrapeSelectors | None = None) -> list[CatalogItem]:
    """Fetch one listing page and extract its items."""
    return extract_items(fetch(url), url, selectors)
