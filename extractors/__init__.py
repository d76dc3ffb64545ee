"""
Extractors for the harvest pipelines.

This package contains pure, unit-testable functions for reading index
pages, detail pages and JSON API records. None of them perform I/O.
"""

from .index_page import (
    normalize_url,
    extract_index_entries,
    drop_incomplete
)
from .field_selector import (
    select_html,
    select_json,
    count_matches
)
from .detail_page import (
    FieldSpec,
    coerce_value,
    extract_fields
)
from .drink_reshaper import (
    strip_prefix,
    fold_ingredients,
    reshape
)

__all__ = [
    'normalize_url',
    'extract_index_entries',
    'drop_incomplete',
    'select_html',
    'select_json',
    'count_matches',
    'FieldSpec',
    'coerce_value',
    'extract_fields',
    'strip_prefix',
    'fold_ingredients',
    'reshape'
]
