"""Name-based, serializable snapshot of a resolved ER data model.

The live model is an object graph with back references; the snapshot flattens
it to names so it can be compared, dumped to JSON and returned from the API.
"""

from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class SnapshotColumn(BaseModel):
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
    reference_to: Optional[str] = None  # "table.column" once resolved


class SnapshotRelationship(BaseModel):
    name: str
    from_entity: str
    from_label: str
    from_cardinality: str
    to_entity: str
    to_cardinality: str


class SnapshotEntity(BaseModel):
    name: str
    columns: List[SnapshotColumn] = Field(default_factory=list)
    relationships: List[SnapshotRelationship] = Field(default_factory=list)


class ERDesignSnapshot(BaseModel):
    name: str
    entities: List[SnapshotEntity] = Field(default_factory=list)

    def entity(self, name: str) -> Optional[SnapshotEntity]:
        return next((e for e in self.entities if e.name == name), None)

    @property
    def relationships(self) -> List[SnapshotRelationship]:
        return [rel for entity in self.entities for rel in entity.relationships]
