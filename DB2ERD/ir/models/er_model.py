"""In-memory ER data model reconstructed from catalog metadata.

The model is an object graph: columns point back at their entity, foreign key
columns point at the column they reference and relationship ends point at
entities. Plain dataclasses are used instead of pydantic models because of those
cycles; ``ERDDataModel.to_snapshot()`` gives a pydantic view when one is needed.

Lookup by name goes through explicit per-scope indexes:
- the model indexes entities by name
- each entity indexes its columns and its relationships by name
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .snapshot import (
    ERDesignSnapshot,
    SnapshotColumn,
    SnapshotEntity,
    SnapshotRelationship,
)
from DB2ERD.utils.error_handling import AnalysisContext, DuplicateColumnError

ONE = "1"
ZERO_OR_MANY = "0..*"


@dataclass(eq=False)
class ERDColumn:
    name: str
    ordinal_position: int = 0
    type: str = ""
    length: Optional[str] = None
    precision: Optional[int] = None
    default_value: Optional[str] = None
    nullable: bool = True
    primary_key: bool = False
    unique: bool = False
    foreign_key: bool = False
    foreign_key_name: Optional[str] = None
    reference_to: Optional["ERDColumn"] = field(default=None, repr=False)
    entity: Optional["ERDEntity"] = field(default=None, repr=False)

    @property
    def qualified_name(self) -> str:
        owner = self.entity.name if self.entity else "?"
        return f"{owner}.{self.name}"


@dataclass(eq=False)
class ERDRelationshipEnd:
    reference: "ERDEntity" = field(repr=False)
    name: str = ""
    cardinality: str = ONE

    @property
    def reference_name(self) -> str:
        return self.reference.name


@dataclass(eq=False)
class ERDRelationship:
    """Connection between two entities named after a foreign key constraint.

    ``end1`` is the referenced side. ``end2`` is the referencing side; its
    ``name`` lists the participating columns in ordinal (row) order.
    """
    name: str
    end1: ERDRelationshipEnd
    end2: ERDRelationshipEnd
    entity: Optional["ERDEntity"] = field(default=None, repr=False)
    columns: List[ERDColumn] = field(default_factory=list, repr=False)

    def add_member(self, column: ERDColumn) -> None:
        """Add a referencing column and rebuild the label in ordinal order."""
        if any(member is column for member in self.columns):
            return
        self.columns.append(column)
        ordered = sorted(self.columns, key=lambda c: c.ordinal_position)
        self.end2.name = ", ".join(c.name for c in ordered)

    @property
    def column_names(self) -> List[str]:
        return [part.strip() for part in self.end2.name.split(",") if part.strip()]


@dataclass(eq=False)
class ERDEntity:
    name: str
    columns: List[ERDColumn] = field(default_factory=list)
    relationships: List[ERDRelationship] = field(default_factory=list, repr=False)
    model: Optional["ERDDataModel"] = field(default=None, repr=False)
    _columns_by_name: Dict[str, ERDColumn] = field(default_factory=dict, repr=False)
    _relationships_by_name: Dict[str, ERDRelationship] = field(default_factory=dict, repr=False)

    def find_column(self, name: Optional[str]) -> Optional[ERDColumn]:
        if name is None:
            return None
        return self._columns_by_name.get(name)

    def find_relationship(self, name: Optional[str]) -> Optional[ERDRelationship]:
        if name is None:
            return None
        return self._relationships_by_name.get(name)

    def add_column(self, column: ERDColumn) -> None:
        if column.name in self._columns_by_name:
            raise DuplicateColumnError(
                message=f"Column '{column.name}' already exists in entity '{self.name}'",
                context=AnalysisContext(table_name=self.name, column_name=column.name),
            )
        column.entity = self
        self.columns.append(column)
        self._columns_by_name[column.name] = column

    def add_relationship(self, relationship: ERDRelationship) -> None:
        relationship.entity = self
        self.relationships.append(relationship)
        self._relationships_by_name.setdefault(relationship.name, relationship)

    @property
    def primary_key(self) -> List[str]:
        return [c.name for c in self.columns if c.primary_key]


@dataclass(eq=False)
class ERDDataModel:
    name: str = "Data Model"
    entities: List[ERDEntity] = field(default_factory=list)
    _entities_by_name: Dict[str, ERDEntity] = field(default_factory=dict, repr=False)

    def find_entity(self, name: Optional[str]) -> Optional[ERDEntity]:
        if name is None:
            return None
        return self._entities_by_name.get(name)

    def add_entity(self, entity: ERDEntity) -> None:
        entity.model = self
        self.entities.append(entity)
        # The most recently registered entity owns the name
        self._entities_by_name[entity.name] = entity

    def iter_columns(self) -> Iterator[ERDColumn]:
        for entity in self.entities:
            yield from entity.columns

    def iter_relationships(self) -> Iterator[ERDRelationship]:
        for entity in self.entities:
            yield from entity.relationships

    def to_snapshot(self) -> ERDesignSnapshot:
        """Flatten the object graph into a name-based pydantic snapshot."""
        entities = []
        for entity in self.entities:
            columns = [
                SnapshotColumn(
                    name=c.name,
                    ordinal_position=c.ordinal_position,
                    type=c.type,
                    length=c.length,
                    precision=c.precision,
                    default_value=c.default_value,
                    nullable=c.nullable,
                    primary_key=c.primary_key,
                    unique=c.unique,
                    foreign_key=c.foreign_key,
                    foreign_key_name=c.foreign_key_name,
                    reference_to=c.reference_to.qualified_name if c.reference_to else None,
                )
                for c in entity.columns
            ]
            relationships = [
                SnapshotRelationship(
                    name=r.name,
                    from_entity=r.end2.reference_name,
                    from_label=r.end2.name,
                    from_cardinality=r.end2.cardinality,
                    to_entity=r.end1.reference_name,
                    to_cardinality=r.end1.cardinality,
                )
                for r in entity.relationships
            ]
            entities.append(SnapshotEntity(name=entity.name, columns=columns, relationships=relationships))
        return ERDesignSnapshot(name=self.name, entities=entities)
