"""DB2ERD - reconstruct an ER data model from a database catalog."""

from .analysis import DbAnalyzer, ProgressEvent, ResolutionReport, SchemaResolver, analyze
from .ir import ERDDataModel
from .sources import ConnectionOptions

__version__ = "0.1.0"

__all__ = [
    "DbAnalyzer",
    "ProgressEvent",
    "ResolutionReport",
    "SchemaResolver",
    "analyze",
    "ERDDataModel",
    "ConnectionOptions",
]
