"""PostgreSQL row source (psycopg2).

Rows are streamed with a server-side cursor so large catalogs are not held in
memory at once.
"""

from __future__ import annotations

from typing import Any

import psycopg2
from psycopg2.extras import RealDictCursor

from .base import CursorRowSource
from .options import ConnectionOptions

POSTGRES_CATALOG_QUERY = """
SELECT col.table_catalog AS table_catalog,
    col.table_schema AS owner,
    col.table_name AS table_name,
    col.column_name AS column_name,
    col.ordinal_position AS ordinal_position,
    col.column_default AS default_setting,
    col.data_type AS data_type,
    col.character_maximum_length AS max_length,
    col.numeric_precision AS numeric_precision,
    col.datetime_precision AS date_precision,
    CAST(CASE col.is_nullable WHEN 'NO' THEN 0 ELSE 1 END AS bit) AS is_nullable,
    CAST(CASE WHEN pk.is_primary_key THEN 1 ELSE 0 END AS bit) AS is_primary_key,
    CAST(CASE WHEN pk.is_unique THEN 1 ELSE 0 END AS bit) AS is_unique,
    CAST(CASE WHEN fk.fk_name IS NULL THEN 0 ELSE 1 END AS bit) AS is_foreign_key,
    fk.fk_name AS foreign_key_name,
    fk.referenced_table_name AS referenced_table_name,
    fk.referenced_column_name AS referenced_column_name
FROM information_schema.columns AS col
LEFT JOIN (
    SELECT o.relnamespace::regnamespace::text AS table_schema,
        o.relname AS table_name,
        a.attname AS column_name,
        i.indisprimary AS is_primary_key,
        i.indisunique AS is_unique
    FROM pg_index AS i
    JOIN pg_attribute AS a
        ON a.attrelid = i.indrelid
        AND a.attnum = ANY(i.indkey)
    JOIN pg_class AS o
        ON i.indrelid = o.oid
) AS pk
    ON col.table_name = pk.table_name
    AND col.table_schema = pk.table_schema
    AND col.column_name = pk.column_name
LEFT JOIN (
    SELECT con.conname AS fk_name,
        cl2.relnamespace::regnamespace::text AS table_schema,
        cl2.relname AS table_name,
        att2.attname AS column_name,
        cl.relname AS referenced_table_name,
        att.attname AS referenced_column_name
    FROM (
        SELECT unnest(con1.conkey) AS parent,
            unnest(con1.confkey) AS child,
            con1.confrelid,
            con1.conrelid,
            con1.conname
        FROM pg_constraint AS con1
        WHERE con1.contype = 'f'
    ) AS con
    JOIN pg_attribute AS att
        ON att.attrelid = con.confrelid
        AND att.attnum = con.child
    JOIN pg_class AS cl
        ON cl.oid = con.confrelid
    JOIN pg_attribute AS att2
        ON att2.attrelid = con.conrelid
        AND att2.attnum = con.parent
    JOIN pg_class AS cl2
        ON cl2.oid = con.conrelid
) AS fk
    ON col.table_name = fk.table_name
    AND col.table_schema = fk.table_schema
    AND col.column_name = fk.column_name
WHERE col.table_schema = %(schema_name)s
    AND col.table_catalog = %(catalog_name)s
ORDER BY col.table_name, col.ordinal_position, fk.fk_name
"""


class PostgresRowSource(CursorRowSource):
    """Catalog rows of one PostgreSQL schema."""

    engine = "postgresql"
    catalog_query = POSTGRES_CATALOG_QUERY
    driver_errors = (psycopg2.Error, OSError)

    def __init__(self, options: ConnectionOptions, batch_size: int = 500):
        super().__init__(batch_size=batch_size)
        self.options = options

    def _connect(self) -> Any:
        password = self.options.password.get_secret_value() if self.options.password else None
        return psycopg2.connect(
            host=self.options.host,
            port=self.options.port,
            dbname=self.options.catalog_name,
            user=self.options.user_name,
            password=password,
            connect_timeout=self.options.connect_timeout,
        )

    def _open_cursor(self, connection: Any) -> Any:
        return connection.cursor(name="db2erd_catalog", cursor_factory=RealDictCursor)
