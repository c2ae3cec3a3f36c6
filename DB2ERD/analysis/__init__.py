"""Catalog analysis: schema resolution and the caller-facing analyze()."""

from .resolver import PendingReference, ResolutionReport, SchemaResolver, UnresolvedReference
from .analyzer import DbAnalyzer, ProgressEvent, ProgressReporter, analyze

__all__ = [
    "PendingReference",
    "ResolutionReport",
    "SchemaResolver",
    "UnresolvedReference",
    "DbAnalyzer",
    "ProgressEvent",
    "ProgressReporter",
    "analyze",
]
