"""IR (Intermediate Representation) models."""

from .catalog import CatalogRow, coerce_flag
from .er_model import (
    ERDColumn,
    ERDDataModel,
    ERDEntity,
    ERDRelationship,
    ERDRelationshipEnd,
    ONE,
    ZERO_OR_MANY,
)
from .snapshot import (
    ERDesignSnapshot,
    SnapshotColumn,
    SnapshotEntity,
    SnapshotRelationship,
)

__all__ = [
    "CatalogRow",
    "coerce_flag",
    "ERDColumn",
    "ERDDataModel",
    "ERDEntity",
    "ERDRelationship",
    "ERDRelationshipEnd",
    "ONE",
    "ZERO_OR_MANY",
    "ERDesignSnapshot",
    "SnapshotColumn",
    "SnapshotEntity",
    "SnapshotRelationship",
]
