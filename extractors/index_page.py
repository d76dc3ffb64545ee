"""
Pure extraction functions for index (listing) pages.

These functions don't perform I/O. They turn the HTML of a listing page
into IndexEntry rows and drop the rows that can't be followed.
"""

import logging
from typing import List, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from harvest_models import IndexEntry

logger = logging.getLogger(__name__)

_UNFOLLOWABLE_PREFIXES = ('#', 'javascript:', 'mailto:')


def normalize_url(base_url: str, href: str) -> str:
    """
    Convert a relative URL to an absolute URL.

    Absolute URLs are returned unchanged, so this is idempotent.

    Args:
        base_url: The base URL to resolve against
        href: The href attribute (may be relative or absolute)

    Returns:
        Absolute URL string
    """
    return urljoin(base_url, href)


def _as_soup(html: Union[str, BeautifulSoup]) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html, 'lxml')


def _resolve_link(raw: Optional[str], base_url: str) -> Optional[str]:
    if raw is None:
        return None
    href = raw.strip()
    if not href or href.startswith(_UNFOLLOWABLE_PREFIXES):
        return None
    return normalize_url(base_url, href)


def extract_index_entries(html: Union[str, BeautifulSoup], base_url: str,
                          entry_css: str, name_attribute: Optional[str] = None,
                          link_attribute: str = 'href') -> List[IndexEntry]:
    """
    Extract (name, detail link) entries from a listing page.

    Every element matched by entry_css yields one entry, even when it has
    no usable link; use drop_incomplete() to filter those out.

    Args:
        html: HTML content (or an already parsed document)
        base_url: Base URL for resolving relative links
        entry_css: CSS selector for the entry elements (e.g. "div.entry > a")
        name_attribute: Attribute holding the name (default: element text)
        link_attribute: Attribute holding the detail link (default: "href")

    Returns:
        List of IndexEntry in document order
    """
    soup = _as_soup(html)
    entries = []

    for node in soup.select(entry_css):
        if name_attribute:
            name = (node.get(name_attribute) or '').strip()
        else:
            name = node.get_text(strip=True)

        link = _resolve_link(node.get(link_attribute), base_url)
        entries.append(IndexEntry(name=name, detail_location=link))

    return entries


def drop_incomplete(entries: List[IndexEntry]) -> List[IndexEntry]:
    """
    Remove entries that have no name or no detail location.

    Args:
        entries: Entries as extracted from the index page

    Returns:
        The complete entries, in their original order
    """
    kept = []
    for entry in entries:
        if entry.is_complete:
            kept.append(entry)
        else:
            logger.debug(f"Dropping incomplete index entry: {entry.name!r}")

    dropped = len(entries) - len(kept)
    if dropped:
        logger.info(f"Dropped {dropped} incomplete index entries")
    return kept
