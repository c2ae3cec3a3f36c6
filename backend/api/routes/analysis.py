"""Analysis endpoints."""

import logging
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks
from uuid import uuid4
from datetime import datetime, UTC

from DB2ERD.sources import ConnectionOptions

from backend.models.requests import AnalysisStartRequest
from backend.models.responses import (
    AnalysisStartResponse,
    AnalysisStatusResponse,
    AnalysisResultResponse,
)
from backend.dependencies import get_job_manager, get_analysis_service
from backend.utils.job_manager import JobManager
from backend.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("/start", response_model=AnalysisStartResponse)
async def start_analysis(
    request: AnalysisStartRequest,
    background_tasks: BackgroundTasks,
    job_manager: JobManager = Depends(get_job_manager),
    analysis_service: AnalysisService = Depends(get_analysis_service)
):
    """
    Start analyzing a database catalog.
    
    Creates a new job, runs the analysis in the background and returns the job_id immediately.
    """
    job_id = str(uuid4())
    options = ConnectionOptions.model_validate(
        request.model_dump(exclude={"model_name", "write_diagram"})
    )
    
    logger.info(f"API ENDPOINT: POST /api/analysis/start -> job {job_id} ({options.describe()})")
    job_manager.create_job(
        job_id=job_id,
        target=options.describe(),
        status="pending"
    )
    
    background_tasks.add_task(
        analysis_service.run_analysis,
        job_id=job_id,
        options=options,
        job_manager=job_manager,
        model_name=request.model_name,
        write_diagram=request.write_diagram,
    )
    
    return AnalysisStartResponse(
        job_id=job_id,
        status="started",
        created_at=datetime.now(UTC).isoformat()
    )


@router.get("/status/{job_id}", response_model=AnalysisStatusResponse)
async def get_status(
    job_id: str,
    job_manager: JobManager = Depends(get_job_manager)
):
    """Get current status and progress events of an analysis job."""
    job = job_manager.get_job(job_id)
    if not job:
        logger.warning(f"Job {job_id} not found")
        raise HTTPException(status_code=404, detail="Job not found")
    
    return AnalysisStatusResponse(
        job_id=job_id,
        status=job["status"],
        target=job["target"],
        events=job["events"],
        error=job.get("error")
    )


@router.get("/result/{job_id}", response_model=AnalysisResultResponse)
async def get_result(
    job_id: str,
    job_manager: JobManager = Depends(get_job_manager)
):
    """Get the resolved ER model of a completed job."""
    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job["status"] != "completed" or job["result"] is None:
        raise HTTPException(status_code=409, detail=f"Job is {job['status']}")
    
    return AnalysisResultResponse(job_id=job_id, **job["result"])
