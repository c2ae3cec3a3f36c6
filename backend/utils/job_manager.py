"""Job state and lifecycle management."""

from typing import Dict, Any, List, Optional
from datetime import datetime, UTC


class JobManager:
    """Manages analysis job state and lifecycle."""
    
    def __init__(self):
        self.jobs: Dict[str, Dict[str, Any]] = {}
    
    def create_job(
        self,
        job_id: str,
        target: str,
        status: str = "pending"
    ):
        """Create a new job."""
        self.jobs[job_id] = {
            "job_id": job_id,
            "target": target,
            "status": status,
            "created_at": datetime.now(UTC).isoformat(),
            "events": [],
            "result": None,
            "error": None,
        }
    
    def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Get job by ID."""
        return self.jobs.get(job_id)
    
    def update_job(
        self,
        job_id: str,
        status: Optional[str] = None,
        error: Optional[Dict[str, Any]] = None
    ):
        """Update job fields."""
        if job_id not in self.jobs:
            return
        
        if status:
            self.jobs[job_id]["status"] = status
        if error:
            self.jobs[job_id]["error"] = error
    
    def add_event(self, job_id: str, event: Dict[str, Any]):
        """Append a progress event to the job."""
        if job_id in self.jobs:
            self.jobs[job_id]["events"].append(event)
    
    def get_events(self, job_id: str) -> List[Dict[str, Any]]:
        """Progress events recorded for the job (empty for unknown jobs)."""
        job = self.jobs.get(job_id)
        return list(job["events"]) if job else []
    
    def set_result(self, job_id: str, result: Dict[str, Any]):
        """Store the analysis result."""
        if job_id in self.jobs:
            self.jobs[job_id]["result"] = result
