"""
Persistence layer for result tables.

Tables are written once per run as JSON Lines or CSV.
"""

from .result_table import (
    ResultTable,
    TableStore,
    JSONLinesTableStore,
    CSVTableStore,
    open_table_store,
    write_table,
    read_table
)

__all__ = [
    'ResultTable',
    'TableStore',
    'JSONLinesTableStore',
    'CSVTableStore',
    'open_table_store',
    'write_table',
    'read_table'
]
