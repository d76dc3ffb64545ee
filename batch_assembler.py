"""
Batch assembly: run a per-item extractor over a list of items and merge
the results into flat rows.

Items are processed strictly one after another, so the output keeps the
input order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import harvest_config
from harvest_errors import NetworkError, ParseError

logger = logging.getLogger(__name__)

ON_ERROR_POLICIES = ('abort', 'skip')


@dataclass
class BatchStats:
    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0


def _item_row(item: Any) -> Dict[str, Any]:
    if hasattr(item, 'to_row'):
        return item.to_row()
    if isinstance(item, dict):
        return dict(item)
    raise TypeError(f"Cannot turn {type(item).__name__} into a row")


def assemble_all(items: Sequence[Any], extract_fn: Callable[[Any], Optional[Dict[str, Any]]],
                 limit: Optional[int] = harvest_config.BATCH_LIMIT,
                 on_error: str = 'abort',
                 stats: Optional[BatchStats] = None) -> List[Dict[str, Any]]:
    """
    Apply extract_fn to the first `limit` items and merge each result
    with the item's own fields.

    Args:
        items: Source items (objects with to_row() or dicts)
        extract_fn: Called once per item; returns a record dict or None
        limit: Maximum number of items to process (None = all)
        on_error: 'abort' re-raises the first NetworkError/ParseError,
            'skip' logs it and leaves the item out
        stats: Optional BatchStats updated in place

    Returns:
        List of merged rows, in input order

    Raises:
        ValueError: For a negative limit or an unknown on_error policy
        NetworkError, ParseError: With on_error='abort'
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    if on_error not in ON_ERROR_POLICIES:
        raise ValueError(f"Unknown on_error policy: {on_error}")

    stats = stats if stats is not None else BatchStats()
    selected = list(items) if limit is None else list(items)[:limit]
    rows = []

    for index, item in enumerate(selected, start=1):
        stats.attempted += 1
        row = _item_row(item)
        logger.info(f"[{index}/{len(selected)}] {row.get('name', '')}")

        try:
            record = extract_fn(item)
        except (NetworkError, ParseError) as e:
            if on_error == 'abort':
                logger.error(f"  Aborting batch: {e}")
                raise
            logger.warning(f"  Skipping item: {e}")
            stats.skipped += 1
            continue

        if record:
            row.update(record)
        rows.append(row)
        stats.succeeded += 1

    return rows
