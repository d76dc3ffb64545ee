"""
Declarative field selectors for HTML and JSON documents.

A selector never fails on a valid document: no match is an empty list.
"""

from typing import Any, List, Optional, Sequence, Union

from bs4 import BeautifulSoup


def _as_soup(document: Union[str, BeautifulSoup]) -> BeautifulSoup:
    if isinstance(document, BeautifulSoup):
        return document
    return BeautifulSoup(document, 'lxml')


def select_html(document: Union[str, BeautifulSoup], css: str,
                attribute: Optional[str] = None) -> List[str]:
    """
    Run a CSS selector and return the matched values in document order.

    Args:
        document: HTML content or parsed document
        css: CSS selector, e.g. 'td[data-source="attack"]' or 'div.entry > a'
        attribute: Return this attribute instead of the element text;
            elements without it are skipped

    Returns:
        List of strings (empty if nothing matched)
    """
    soup = _as_soup(document)
    values = []

    for node in soup.select(css):
        if attribute is None:
            values.append(node.get_text(strip=True))
            continue
        value = node.get(attribute)
        if value is None:
            continue
        if isinstance(value, list):
            # multi-valued attributes such as class
            value = ' '.join(value)
        values.append(value.strip())

    return values


def select_json(document: Any, key_path: str,
                columns: Optional[Sequence[str]] = None) -> List[Any]:
    """
    Look up a dotted key path in a mapping and return the result as a list.

    Args:
        document: Parsed JSON (normally a dict)
        key_path: Dotted path, e.g. "drinks" or "data.items"
        columns: Optional projection applied to each record of the result

    Returns:
        The list found at key_path, a one-element list for a scalar, or an
        empty list when the path is missing or null
    """
    current = document
    for key in key_path.split('.'):
        if not isinstance(current, dict) or key not in current:
            return []
        current = current[key]

    if current is None:
        return []
    if not isinstance(current, list):
        current = [current]

    if columns is None:
        return list(current)

    projected = []
    for record in current:
        if not isinstance(record, dict):
            continue
        projected.append({column: record.get(column) for column in columns})
    return projected


def count_matches(document: Union[str, BeautifulSoup], css: str) -> int:
    """
    Count how many elements match a CSS selector.
    Useful for debugging and verbose mode.
    """
    return len(_as_soup(document).select(css))
