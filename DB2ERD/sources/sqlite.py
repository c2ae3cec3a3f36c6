"""SQLite row source.

SQLite has no information_schema; the catalog query below builds the same row
shape from the table-valued PRAGMA functions. SQLite foreign keys carry no
constraint name, so one is synthesised as ``fk_<table>_<id>``, where ``id``
groups the columns of a composite key.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from DB2ERD.utils.error_handling import AnalysisContext, RowSourceError

from .base import CursorRowSource

SQLITE_CATALOG_QUERY = """
SELECT
    NULL AS table_catalog,
    :schema_name AS owner,
    m.name AS table_name,
    c.name AS column_name,
    c.cid + 1 AS ordinal_position,
    c.dflt_value AS default_setting,
    c.type AS data_type,
    NULL AS max_length,
    NULL AS numeric_precision,
    NULL AS date_precision,
    CASE WHEN c."notnull" = 1 OR c.pk > 0 THEN 0 ELSE 1 END AS is_nullable,
    CASE WHEN c.pk > 0 THEN 1 ELSE 0 END AS is_primary_key,
    CASE WHEN EXISTS (
        SELECT 1
        FROM pragma_index_list(m.name, :schema_name) AS il
        JOIN pragma_index_info(il.name, :schema_name) AS ii
        WHERE il."unique" = 1 AND ii.name = c.name
    ) THEN 1 ELSE 0 END AS is_unique,
    CASE WHEN fk.id IS NULL THEN 0 ELSE 1 END AS is_foreign_key,
    CASE WHEN fk.id IS NULL THEN NULL ELSE 'fk_' || m.name || '_' || fk.id END AS foreign_key_name,
    fk."table" AS referenced_table_name,
    COALESCE(
        fk."to",
        (SELECT p.name FROM pragma_table_info(fk."table", :schema_name) AS p WHERE p.pk = fk.seq + 1)
    ) AS referenced_column_name
FROM sqlite_master AS m
JOIN pragma_table_info(m.name, :schema_name) AS c
LEFT JOIN pragma_foreign_key_list(m.name, :schema_name) AS fk
    ON fk."from" = c.name
WHERE m.type = 'table'
    AND m.name NOT LIKE 'sqlite_%'
ORDER BY m.name, c.cid, fk.id
"""


class SqliteRowSource(CursorRowSource):
    """Catalog rows of a SQLite database file."""

    engine = "sqlite"
    catalog_query = SQLITE_CATALOG_QUERY
    driver_errors = (sqlite3.Error, OSError)
    default_params = {"schema_name": "main", "catalog_name": None}

    def __init__(self, path: str, batch_size: int = 500):
        super().__init__(batch_size=batch_size)
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        if self.path != ":memory:" and not Path(self.path).exists():
            # sqlite3.connect would silently create an empty database
            raise RowSourceError(
                message=f"SQLite database not found: {self.path}",
                context=AnalysisContext(additional_context={"engine": self.engine}),
            )
        # Blocking calls run in worker threads, not necessarily the same one
        connection = sqlite3.connect(self.path, check_same_thread=False)
        connection.row_factory = sqlite3.Row
        return connection

    def _to_mapping(self, row: Any) -> dict:
        return {key: row[key] for key in row.keys()}
