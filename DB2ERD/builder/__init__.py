"""Factories that create and insert ER model elements."""

from .model_builder import ModelBuilder, UnresolvedReferenceCallback

__all__ = ["ModelBuilder", "UnresolvedReferenceCallback"]
