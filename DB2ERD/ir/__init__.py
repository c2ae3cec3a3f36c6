"""Intermediate Representation (IR) of catalog rows and the ER data model."""

from .models import (
    CatalogRow,
    ERDColumn,
    ERDDataModel,
    ERDEntity,
    ERDRelationship,
    ERDRelationshipEnd,
    ERDesignSnapshot,
)

__all__ = [
    "CatalogRow",
    "ERDColumn",
    "ERDDataModel",
    "ERDEntity",
    "ERDRelationship",
    "ERDRelationshipEnd",
    "ERDesignSnapshot",
]
