"""
Result table persistence.

A result table is written once per run and read many times afterwards.
Two formats are supported, picked by file suffix: JSON Lines (.jsonl)
and CSV (.csv).
"""

from typing import Protocol, List, Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path
import csv
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass
class ResultTable:
    """Ordered rows plus the column order used when writing them."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    columns: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.columns:
            self.columns = _columns_from_rows(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


def _columns_from_rows(rows: List[Dict[str, Any]]) -> List[str]:
    columns = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


class TableStore(Protocol):
    """
    Abstract interface for table storage.

    Implementations differ only in file format.
    """

    path: Path

    def write(self, table: ResultTable, force: bool = False) -> Path:
        """Write the table; refuse to replace an existing file unless forced."""
        ...

    def read(self) -> ResultTable:
        """Read a previously written table."""
        ...


class _FileTableStore:
    suffix = ''

    def __init__(self, path: str):
        self.path = Path(path)

    def write(self, table: ResultTable, force: bool = False) -> Path:
        """
        Write the table to disk.

        The file is written to a temporary sibling first and moved into
        place, so a failed write never leaves a half-written table.

        Args:
            table: Table to write
            force: Replace an existing file

        Returns:
            Path of the written file

        Raises:
            FileExistsError: If the file exists and force is False
        """
        if self.path.exists() and not force:
            raise FileExistsError(f"Result table already exists: {self.path} (use force to overwrite)")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + '.tmp')

        with open(tmp_path, 'w', encoding='utf-8', newline='') as f:
            self._dump(table, f)
        os.replace(tmp_path, self.path)

        logger.info(f"Wrote {len(table)} rows to {self.path}")
        return self.path

    def read(self) -> ResultTable:
        if not self.path.exists():
            raise FileNotFoundError(f"Result table not found: {self.path}")
        with open(self.path, 'r', encoding='utf-8', newline='') as f:
            return self._load(f)

    def _dump(self, table: ResultTable, f) -> None:
        raise NotImplementedError

    def _load(self, f) -> ResultTable:
        raise NotImplementedError


class JSONLinesTableStore(_FileTableStore):
    """One JSON object per line, keys in column order."""

    suffix = '.jsonl'

    def _dump(self, table: ResultTable, f) -> None:
        for row in table.rows:
            ordered = {column: row.get(column) for column in table.columns}
            f.write(json.dumps(ordered, ensure_ascii=False) + '\n')

    def _load(self, f) -> ResultTable:
        rows = []
        for line in f:
            line = line.strip()
            if line:
                rows.append(json.loads(line))
        return ResultTable(rows=rows)


class CSVTableStore(_FileTableStore):
    """
    CSV with a header row.

    Values are read back as strings; empty cells become None.
    """

    suffix = '.csv'

    def _dump(self, table: ResultTable, f) -> None:
        writer = csv.DictWriter(f, fieldnames=table.columns, extrasaction='ignore')
        writer.writeheader()
        for row in table.rows:
            writer.writerow({k: ('' if v is None else v) for k, v in row.items()})

    def _load(self, f) -> ResultTable:
        reader = csv.DictReader(f)
        rows = [{k: (v if v != '' else None) for k, v in row.items()} for row in reader]
        return ResultTable(rows=rows, columns=list(reader.fieldnames or []))


_STORES = {
    JSONLinesTableStore.suffix: JSONLinesTableStore,
    CSVTableStore.suffix: CSVTableStore,
}


def open_table_store(path: str) -> TableStore:
    """
    Pick a table store from the file suffix.

    Raises:
        ValueError: For an unsupported suffix
    """
    suffix = Path(path).suffix.lower()
    store_cls = _STORES.get(suffix)
    if store_cls is None:
        supported = ', '.join(sorted(_STORES))
        raise ValueError(f"Unsupported table format '{suffix}' (supported: {supported})")
    return store_cls(path)


def write_table(table: ResultTable, path: str, force: bool = False) -> Path:
    """Write a table to path, choosing the format from its suffix."""
    return open_table_store(path).write(table, force=force)


def read_table(path: str) -> ResultTable:
    """Read a table written by write_table()."""
    return open_table_store(path).read()
