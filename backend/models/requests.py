"""Request models for API endpoints."""

from pydantic import Field
from typing import Optional

from DB2ERD.sources import ConnectionOptions


class AnalysisStartRequest(ConnectionOptions):
    """Request to analyze a database catalog."""
    model_name: Optional[str] = Field(None, min_length=1, description="Name of the resulting data model")
    write_diagram: bool = Field(False, description="Save the Graphviz source of the diagram")

    model_config = {"protected_namespaces": ()}
