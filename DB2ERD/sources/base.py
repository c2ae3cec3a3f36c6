"""Row source interface and the shared cursor-streaming implementation.

A row source executes a catalog query and yields one row per (table, column),
ordered by table name and then ordinal position. The resolver depends on that
order, so adapters must never reorder what the database returns.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Callable, Mapping, Protocol, Tuple, Type, Union, runtime_checkable

from DB2ERD.ir.models import CatalogRow
from DB2ERD.utils.error_handling import AnalysisContext, RowSourceError
from DB2ERD.utils.logging import get_logger

logger = get_logger(__name__)

QueryParams = Mapping[str, Any]


@runtime_checkable
class RowSource(Protocol):
    """Anything that can stream catalog rows for a query."""

    catalog_query: str

    def execute(self, query: str, params: QueryParams) -> AsyncIterator[Union[CatalogRow, Mapping[str, Any]]]:
        ...


class CursorRowSource:
    """Streams rows from a DB-API cursor, running blocking calls in a worker thread.

    Subclasses provide ``_connect`` and ``_open_cursor`` and list the driver
    exceptions that count as transport failures.
    """

    engine: str = ""
    catalog_query: str = ""
    driver_errors: Tuple[Type[BaseException], ...] = (OSError,)
    default_params: Mapping[str, Any] = {}

    def __init__(self, batch_size: int = 500):
        self.batch_size = batch_size

    async def execute(self, query: str, params: QueryParams) -> AsyncIterator[Mapping[str, Any]]:
        connection = await self._call(self._connect, query=query)
        try:
            cursor = await self._call(self._open_cursor, connection, query=query)
            await self._call(cursor.execute, query, {**self.default_params, **params}, query=query)
            while True:
                batch = await self._call(cursor.fetchmany, self.batch_size, query=query)
                if not batch:
                    break
                for row in batch:
                    yield self._to_mapping(row)
            await self._call(cursor.close, query=query)
        finally:
            await asyncio.to_thread(connection.close)

    def _connect(self) -> Any:
        raise NotImplementedError

    def _open_cursor(self, connection: Any) -> Any:
        return connection.cursor()

    def _to_mapping(self, row: Any) -> Mapping[str, Any]:
        return dict(row)

    async def _call(self, func: Callable[..., Any], *args: Any, query: str) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except self.driver_errors as e:
            logger.error(f"{self.engine} catalog query failed: {e}")
            raise RowSourceError(
                message=f"{self.engine} catalog query failed: {e}",
                context=AnalysisContext(additional_context={"engine": self.engine, "query": query[:200]}),
                original_exception=e,
            ) from e
