"""
Pure extraction for detail pages.

Each field is read from the first element its selector matches, which is
the page's canonical variant; alternate forms further down are ignored.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from harvest_errors import ParseError
from .field_selector import select_html

FIELD_TYPES = ('str', 'int', 'float')

_INT_RE = re.compile(r'-?\d[\d,]*')
_FLOAT_RE = re.compile(r'-?\d[\d,]*(?:\.\d+)?')


@dataclass(frozen=True)
class FieldSpec:
    """How to read one named field from a detail page."""
    name: str
    css: str
    attribute: Optional[str] = None
    type: str = 'str'

    def __post_init__(self):
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unknown field type for '{self.name}': {self.type}")


def coerce_value(raw: str, type_name: str) -> Any:
    """
    Convert a selected string to the declared field type.

    Numbers are taken from the first numeric run in the text, so "118",
    " 1,234 " and "118 (max)" all work.

    Raises:
        ParseError: If the text holds no number for a numeric type
    """
    if type_name == 'str':
        return raw.strip()

    pattern = _INT_RE if type_name == 'int' else _FLOAT_RE
    match = pattern.search(raw)
    if not match:
        raise ParseError(f"Expected {type_name} but found {raw!r}")

    number = match.group().replace(',', '')
    if type_name == 'int':
        return int(number)
    return float(number)


def extract_fields(document: Union[str, BeautifulSoup],
                   field_specs: List[FieldSpec]) -> Dict[str, Any]:
    """
    Build one record from a detail page.

    Args:
        document: HTML content or parsed document
        field_specs: Fields to extract

    Returns:
        Dict keyed by field name; a field whose selector matched nothing
        is None
    """
    record = {}
    for spec in field_specs:
        values = select_html(document, spec.css, spec.attribute)
        if not values:
            record[spec.name] = None
            continue
        record[spec.name] = coerce_value(values[0], spec.type)
    return record
