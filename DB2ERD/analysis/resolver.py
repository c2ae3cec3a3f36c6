"""Schema resolver: turns the ordered catalog row stream into an ER model.

Resolution runs in two phases:

1. Streaming ingestion. Rows are consumed strictly in delivery order (table
   name, then ordinal position). A change of table name starts a new entity.
   Foreign keys whose target is already known become references and
   relationships immediately; the others are queued as pending references.
2. Reconciliation. Once every row has been seen, each pending reference is
   resolved again. Targets that still do not exist are reported as warnings
   and the run carries on.

Foreign key columns that share a constraint name inside one entity are merged
into a single relationship whose referencing end lists all column names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterable, Iterable, List, Mapping, Optional, Set, Union

from pydantic import BaseModel, Field, ValidationError

from DB2ERD.builder import ModelBuilder
from DB2ERD.ir.models import CatalogRow, ERDColumn, ERDDataModel, ERDEntity, ERDRelationship
from DB2ERD.utils.error_handling import (
    AnalysisContext,
    InvalidRelationshipError,
    NonContiguousRowsError,
    RowSourceError,
)
from DB2ERD.utils.logging import get_logger

logger = get_logger(__name__)

RowLike = Union[CatalogRow, Mapping[str, Any]]


@dataclass(frozen=True)
class PendingReference:
    """A foreign key seen in phase 1 whose target was not known yet.

    ``attach`` is False for an additional constraint on a column that already
    references another column; resolving it only folds the column into that
    constraint's relationship.
    """
    column: ERDColumn
    foreign_key_name: Optional[str]
    ref_entity_name: Optional[str]
    ref_column_name: Optional[str]
    attach: bool = True


class UnresolvedReference(BaseModel):
    foreign_key_name: Optional[str] = None
    table_name: str
    column_name: str
    ref_table_name: Optional[str] = None
    ref_column_name: Optional[str] = None


class ResolutionReport(BaseModel):
    """Counts of what one resolution run added to the model."""
    rows: int = 0
    entities: int = 0
    columns: int = 0
    relationships: int = 0
    deferred_references: int = 0
    resolved_deferred_references: int = 0
    unresolved: List[UnresolvedReference] = Field(default_factory=list)


class SchemaResolver:
    """Drives the model builder over one ordered stream of catalog rows.

    A resolver instance serves exactly one run against one model.
    """

    def __init__(
        self,
        model: ERDDataModel,
        builder: Optional[ModelBuilder] = None,
        enforce_contiguous_tables: bool = True,
    ):
        self.model = model
        self.builder = builder or ModelBuilder(model)
        self.enforce_contiguous_tables = enforce_contiguous_tables
        self.pending_references: List[PendingReference] = []
        self.report = ResolutionReport()
        self._seen_tables: Set[str] = set()
        self._phase = 1

    async def resolve(self, rows: AsyncIterable[RowLike]) -> ResolutionReport:
        """Run both phases over an asynchronous row stream."""
        active_entity: Optional[ERDEntity] = None
        async for row in rows:
            active_entity = self.process_row(row, active_entity)
        self.reconcile_pending()
        return self.finish()

    def resolve_rows(self, rows: Iterable[RowLike]) -> ResolutionReport:
        """Run both phases over rows that are already in memory."""
        active_entity: Optional[ERDEntity] = None
        for row in rows:
            active_entity = self.process_row(row, active_entity)
        self.reconcile_pending()
        return self.finish()

    def process_row(self, row: RowLike, active_entity: Optional[ERDEntity]) -> ERDEntity:
        """
        Phase 1 for a single row.

        Args:
            row: Catalog row (model or mapping)
            active_entity: Entity of the previous row, None for the first row

        Returns:
            ERDEntity: The entity that is active after this row
        """
        row = self._as_row(row)
        self.report.rows += 1

        if active_entity is None or active_entity.name != row.table_name:
            active_entity = self._start_entity(row.table_name)

        existing = active_entity.find_column(row.column_name)
        if existing is not None:
            self._merge_repeated_row(active_entity, existing, row)
            return active_entity

        column = self.builder.create_column(active_entity, row, self._defer_reference)
        self.builder.add_column(active_entity, column)
        self.report.columns += 1

        if column.foreign_key and column.reference_to is not None:
            self.add_or_set_relationship(
                active_entity, column, column.reference_to, row.foreign_key_name
            )

        return active_entity

    def reconcile_pending(self) -> None:
        """Phase 2: retry every pending reference in the order it was recorded."""
        self._phase = 2
        pending, self.pending_references = self.pending_references, []
        logger.debug(f"Reconciling {len(pending)} pending reference(s)")

        for reference in pending:
            column = reference.column
            target = self.builder.resolve_reference(
                column,
                reference.foreign_key_name,
                reference.ref_entity_name,
                reference.ref_column_name,
                on_failure=self._report_unresolved,
            )
            if reference.attach:
                column.reference_to = target
            if target is None:
                continue

            self.report.resolved_deferred_references += 1
            self.add_or_set_relationship(column.entity, column, target, reference.foreign_key_name)

    def add_or_set_relationship(
        self,
        namespace: ERDEntity,
        from_column: ERDColumn,
        to_column: Optional[ERDColumn],
        name: str,
    ) -> ERDRelationship:
        """
        Create the relationship named ``name`` in ``namespace`` or extend it.

        An existing relationship gets ``from_column`` added to the label of its
        referencing end, kept in ordinal order, which is how composite foreign
        keys end up as one relationship.

        Raises:
            InvalidRelationshipError: ``from_column`` is not a foreign key or
                ``to_column`` is missing
        """
        context = AnalysisContext(
            phase=self._phase,
            table_name=namespace.name if namespace else None,
            column_name=from_column.name,
            constraint_name=name,
        )
        if not from_column.foreign_key:
            raise InvalidRelationshipError(message="'from_column' is not a foreign key", context=context)
        if to_column is None:
            raise InvalidRelationshipError(message="'to_column' is undefined", context=context)

        relationship = namespace.find_relationship(name)
        if relationship is None:
            relationship = self.builder.create_relationship(namespace, from_column, to_column, name)
            self.builder.add_relationship(namespace, relationship)
            self.report.relationships += 1
        else:
            relationship.add_member(from_column)

        return relationship

    def finish(self) -> ResolutionReport:
        logger.info(
            f"Resolved {self.report.rows} row(s) into {self.report.entities} entities, "
            f"{self.report.columns} columns and {self.report.relationships} relationships"
        )
        if self.report.unresolved:
            logger.info(f"{len(self.report.unresolved)} reference(s) could not be resolved")
        return self.report

    def _start_entity(self, table_name: str) -> ERDEntity:
        if table_name in self._seen_tables:
            if self.enforce_contiguous_tables:
                raise NonContiguousRowsError(
                    message=f"Rows for table '{table_name}' are not contiguous in the catalog stream",
                    context=AnalysisContext(phase=1, table_name=table_name),
                )
            logger.warning(f"Table '{table_name}' reappeared in the row stream; creating a second entity")

        entity = self.builder.create_entity(table_name)
        self.builder.add_entity(entity)
        self._seen_tables.add(table_name)
        self.report.entities += 1
        return entity

    def _merge_repeated_row(self, entity: ERDEntity, column: ERDColumn, row: CatalogRow) -> None:
        # Catalog joins emit one row per index or constraint a column takes part in
        column.primary_key = column.primary_key or row.is_primary_key
        column.unique = column.unique or row.is_unique
        if not row.is_foreign_key or row.foreign_key_name == column.foreign_key_name:
            return

        if column.foreign_key:
            # The first constraint owns reference_to; later ones only join their relationship
            logger.debug(
                f"Column {column.qualified_name} is also part of '{row.foreign_key_name}' "
                f"(references '{column.foreign_key_name}')"
            )
            target = self.builder.resolve_reference(
                column,
                row.foreign_key_name,
                row.referenced_table_name,
                row.referenced_column_name,
                on_failure=self._defer_additional_reference,
            )
            if target is not None:
                self.add_or_set_relationship(entity, column, target, row.foreign_key_name)
            return

        column.foreign_key = True
        column.foreign_key_name = row.foreign_key_name
        column.reference_to = self.builder.resolve_reference(
            column,
            row.foreign_key_name,
            row.referenced_table_name,
            row.referenced_column_name,
            on_failure=self._defer_reference,
        )
        if column.reference_to is not None:
            self.add_or_set_relationship(entity, column, column.reference_to, row.foreign_key_name)

    def _defer_additional_reference(
        self,
        column: ERDColumn,
        foreign_key_name: Optional[str],
        ref_entity_name: Optional[str],
        ref_column_name: Optional[str],
    ) -> None:
        self._defer_reference(column, foreign_key_name, ref_entity_name, ref_column_name, attach=False)

    def _defer_reference(
        self,
        column: ERDColumn,
        foreign_key_name: Optional[str],
        ref_entity_name: Optional[str],
        ref_column_name: Optional[str],
        attach: bool = True,
    ) -> None:
        self.pending_references.append(
            PendingReference(column, foreign_key_name, ref_entity_name, ref_column_name, attach)
        )
        self.report.deferred_references += 1
        logger.debug(
            f"Deferred reference '{foreign_key_name}': "
            f"{column.qualified_name} -> {ref_entity_name}.{ref_column_name}"
        )

    def _report_unresolved(
        self,
        column: ERDColumn,
        foreign_key_name: Optional[str],
        ref_entity_name: Optional[str],
        ref_column_name: Optional[str],
    ) -> None:
        logger.warning(
            f"Reference '{foreign_key_name}' cannot be resolved! "
            f"({column.qualified_name} -> {ref_entity_name}.{ref_column_name})"
        )
        self.report.unresolved.append(
            UnresolvedReference(
                foreign_key_name=foreign_key_name,
                table_name=column.entity.name if column.entity else "",
                column_name=column.name,
                ref_table_name=ref_entity_name,
                ref_column_name=ref_column_name,
            )
        )

    @staticmethod
    def _as_row(row: RowLike) -> CatalogRow:
        if isinstance(row, CatalogRow):
            parsed = row
        else:
            try:
                parsed = CatalogRow.model_validate(dict(row))
            except ValidationError as e:
                raise RowSourceError(
                    message=f"Malformed catalog row: {e.error_count()} validation error(s)",
                    context=AnalysisContext(
                        phase=1,
                        table_name=row.get("table_name"),
                        column_name=row.get("column_name"),
                    ),
                    original_exception=e,
                ) from e

        if parsed.is_foreign_key and not parsed.foreign_key_name:
            # Some engines report no constraint name; one relationship per column then
            parsed = parsed.model_copy(
                update={"foreign_key_name": f"fk_{parsed.table_name}_{parsed.column_name}"}
            )
        return parsed
