"""Standardized errors for DB2ERD analysis runs.

Data-quality problems (dangling foreign keys) are never raised: the resolver
logs them as warnings. Everything in this module aborts the current run.
"""

from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
import traceback

from DB2ERD.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AnalysisContext:
    """Where in the catalog an error happened."""
    phase: Optional[int] = None
    table_name: Optional[str] = None
    column_name: Optional[str] = None
    constraint_name: Optional[str] = None
    additional_context: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        parts = []
        if self.phase is not None:
            parts.append(f"Phase {self.phase}")
        if self.table_name:
            parts.append(f"Table: {self.table_name}")
        if self.column_name:
            parts.append(f"Column: {self.column_name}")
        if self.constraint_name:
            parts.append(f"Constraint: {self.constraint_name}")
        return " | ".join(parts)


@dataclass(eq=False)
class ERDError(Exception):
    """Base error for everything that aborts an analysis run."""
    message: str
    context: AnalysisContext = field(default_factory=AnalysisContext)
    original_exception: Optional[Exception] = None
    error_type: str = "erd_error"

    def __str__(self) -> str:
        location = self.context.describe()
        if location:
            return f"{self.message} ({location})"
        return self.message


@dataclass(eq=False)
class InvalidRelationshipError(ERDError):
    """A relationship was built from a non foreign key column or without a target.

    Indicates a resolver bug, never bad catalog data.
    """
    error_type: str = "invalid_relationship"


@dataclass(eq=False)
class NonContiguousRowsError(ERDError):
    """Rows of one table were interleaved with rows of another table."""
    error_type: str = "non_contiguous_rows"


@dataclass(eq=False)
class DuplicateColumnError(ERDError):
    """The same column name was delivered twice for one entity."""
    error_type: str = "duplicate_column"


@dataclass(eq=False)
class RowSourceError(ERDError):
    """The catalog query could not be executed or the connection was lost."""
    error_type: str = "row_source_error"


@dataclass(eq=False)
class ConcurrentAnalysisError(ERDError):
    """Another analysis run is already mutating the same model."""
    error_type: str = "concurrent_analysis"


def log_error_with_context(
    error: Exception,
    context: AnalysisContext,
    level: str = "error"
) -> None:
    """
    Log error with full context information.
    
    Args:
        error: The exception that occurred
        context: Error context information
        level: Log level ("error", "warning", "critical")
    """
    location = context.describe()
    log_msg = f"Analysis error | {location}" if location else "Analysis error"
    
    if level == "critical":
        logger.critical(f"{log_msg}: {error}", exc_info=True)
    elif level == "warning":
        logger.warning(f"{log_msg}: {error}", exc_info=True)
    else:
        logger.error(f"{log_msg}: {error}", exc_info=True)
    
    if context.additional_context:
        logger.debug(f"Additional context: {context.additional_context}")


def create_error_response(
    error: Exception,
    context: Optional[AnalysisContext] = None,
) -> Dict[str, Any]:
    """
    Create standardized error response dictionary.
    
    Args:
        error: The exception that occurred
        context: Error context information. Taken from the error itself when
            it is an ERDError and no context is given.
        
    Returns:
        Dictionary with error information
    """
    if context is None:
        context = error.context if isinstance(error, ERDError) else AnalysisContext()

    error_response: Dict[str, Any] = {
        "success": False,
        "error": {
            "type": type(error).__name__,
            "message": str(error),
            "timestamp": datetime.now().isoformat(),
        }
    }
    
    if isinstance(error, ERDError):
        error_response["error"]["error_type"] = error.error_type
    if context.phase is not None:
        error_response["error"]["phase"] = context.phase
    if context.table_name:
        error_response["error"]["table_name"] = context.table_name
    if context.column_name:
        error_response["error"]["column_name"] = context.column_name
    if context.constraint_name:
        error_response["error"]["constraint_name"] = context.constraint_name
    
    if error.__traceback__ is not None:
        tb_str = "".join(traceback.format_tb(error.__traceback__))
        # Keep only the tail of long tracebacks
        error_response["error"]["traceback"] = tb_str[-500:] if len(tb_str) > 500 else tb_str
    
    if context.additional_context:
        error_response["error"]["additional_context"] = context.additional_context
    
    return error_response
