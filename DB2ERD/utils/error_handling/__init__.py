"""Standardized error handling utilities.

Provides the exception taxonomy and consistent error logging for analysis runs.
"""

from .handlers import (
    AnalysisContext,
    ERDError,
    InvalidRelationshipError,
    NonContiguousRowsError,
    DuplicateColumnError,
    RowSourceError,
    ConcurrentAnalysisError,
    log_error_with_context,
    create_error_response,
)

__all__ = [
    "AnalysisContext",
    "ERDError",
    "InvalidRelationshipError",
    "NonContiguousRowsError",
    "DuplicateColumnError",
    "RowSourceError",
    "ConcurrentAnalysisError",
    "log_error_with_context",
    "create_error_response",
]
