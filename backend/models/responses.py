"""Response models for API endpoints."""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from DB2ERD.analysis import ProgressEvent, ResolutionReport
from DB2ERD.ir.models import ERDesignSnapshot


class AnalysisStartResponse(BaseModel):
    """Response when starting an analysis."""
    job_id: str
    status: str
    created_at: str


class AnalysisStatusResponse(BaseModel):
    """Response for job status."""
    job_id: str
    status: str
    target: str
    events: List[ProgressEvent] = []
    error: Optional[Dict[str, Any]] = None


class AnalysisResultResponse(BaseModel):
    """Resolved model of a completed job."""
    job_id: str
    model: ERDesignSnapshot
    report: ResolutionReport
    diagram_source: Optional[str] = None
    diagram_path: Optional[str] = None

    model_config = {"protected_namespaces": ()}
