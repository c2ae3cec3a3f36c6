"""Row source over rows that were fetched elsewhere."""

from __future__ import annotations

from typing import Any, AsyncIterator, Iterable, List, Mapping, Union

from DB2ERD.ir.models import CatalogRow

from .base import QueryParams


class StaticRowSource:
    """Yields the given rows in the given order; the query is ignored."""

    catalog_query = ""

    def __init__(self, rows: Iterable[Union[CatalogRow, Mapping[str, Any]]]):
        self.rows: List[Union[CatalogRow, Mapping[str, Any]]] = list(rows)

    async def execute(
        self, query: str, params: QueryParams
    ) -> AsyncIterator[Union[CatalogRow, Mapping[str, Any]]]:
        for row in self.rows:
            yield row
