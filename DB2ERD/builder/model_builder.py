"""Model builder: creates entities, columns and relationships and inserts them.

The builder makes no decisions about identity or ordering; the schema resolver
owns those. Every method here either constructs one element or attaches one.
"""

from __future__ import annotations

from typing import Callable, Optional

from DB2ERD.ir.models import (
    CatalogRow,
    ERDColumn,
    ERDDataModel,
    ERDEntity,
    ERDRelationship,
    ERDRelationshipEnd,
    ONE,
    ZERO_OR_MANY,
)
from DB2ERD.utils.logging import get_logger

logger = get_logger(__name__)

# (column, foreign_key_name, ref_entity_name, ref_column_name)
UnresolvedReferenceCallback = Callable[[ERDColumn, Optional[str], Optional[str], Optional[str]], None]

UNBOUNDED_LENGTH = -1


class ModelBuilder:
    """Builds ER elements into one ``ERDDataModel``."""

    def __init__(self, model: ERDDataModel):
        self.model = model

    def create_entity(self, name: str) -> ERDEntity:
        return ERDEntity(name=name)

    def add_entity(self, entity: ERDEntity) -> None:
        self.model.add_entity(entity)
        logger.debug(f"Entity '{entity.name}' added to model '{self.model.name}'")

    def create_column(
        self,
        entity: ERDEntity,
        row: CatalogRow,
        on_unresolved: Optional[UnresolvedReferenceCallback] = None,
    ) -> ERDColumn:
        """
        Create a column of ``entity`` from a catalog row.
        
        For foreign key rows the reference is resolved right away when the
        target entity and column already exist; otherwise ``on_unresolved``
        is called and the column keeps no reference.
        
        Args:
            entity: Entity the column will belong to
            row: Catalog row describing the column
            on_unresolved: Called with (column, fk_name, ref_entity_name, ref_column_name)
                when the foreign key target is not known yet
            
        Returns:
            ERDColumn: The new column (not yet added to the entity)
        """
        column = ERDColumn(
            name=row.column_name,
            ordinal_position=row.ordinal_position,
            type=(row.data_type or "").upper(),
            length=self._length_of(row),
            precision=row.numeric_precision if row.numeric_precision is not None else row.date_precision,
            default_value=row.default_value,
            nullable=row.is_nullable,
            primary_key=row.is_primary_key,
            unique=row.is_unique,
            foreign_key=row.is_foreign_key,
            foreign_key_name=row.foreign_key_name if row.is_foreign_key else None,
            entity=entity,
        )

        if column.foreign_key:
            column.reference_to = self.resolve_reference(
                column,
                row.foreign_key_name,
                row.referenced_table_name,
                row.referenced_column_name,
                on_failure=on_unresolved,
            )

        return column

    def add_column(self, entity: ERDEntity, column: ERDColumn) -> None:
        entity.add_column(column)

    def create_relationship(
        self,
        namespace: ERDEntity,
        from_column: ERDColumn,
        to_column: ERDColumn,
        name: str,
    ) -> ERDRelationship:
        """Create a relationship from ``namespace`` (referencing) to the entity owning ``to_column``."""
        end1 = ERDRelationshipEnd(
            reference=to_column.entity,
            cardinality="0..1" if from_column.nullable else ONE,
        )
        end2 = ERDRelationshipEnd(
            reference=namespace,
            name=from_column.name,
            cardinality=ZERO_OR_MANY,
        )
        return ERDRelationship(name=name, end1=end1, end2=end2, columns=[from_column])

    def add_relationship(self, namespace: ERDEntity, relationship: ERDRelationship) -> None:
        namespace.add_relationship(relationship)
        logger.debug(
            f"Relationship '{relationship.name}' added: "
            f"{namespace.name} -> {relationship.end1.reference_name}"
        )

    def resolve_reference(
        self,
        column: ERDColumn,
        foreign_key_name: Optional[str],
        ref_entity_name: Optional[str],
        ref_column_name: Optional[str],
        on_failure: Optional[UnresolvedReferenceCallback] = None,
    ) -> Optional[ERDColumn]:
        """Look up the referenced column by entity and column name."""
        ref_entity = self.model.find_entity(ref_entity_name)
        ref_column = ref_entity.find_column(ref_column_name) if ref_entity else None

        if ref_column is None and on_failure is not None:
            on_failure(column, foreign_key_name, ref_entity_name, ref_column_name)

        return ref_column

    @staticmethod
    def _length_of(row: CatalogRow) -> Optional[str]:
        if row.max_length is None:
            return None
        if row.max_length == UNBOUNDED_LENGTH:
            return "MAX"
        return str(row.max_length)
