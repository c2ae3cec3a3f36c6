"""FastAPI dependencies - process-wide singletons."""

from functools import lru_cache
from backend.utils.job_manager import JobManager
from backend.services.analysis_service import AnalysisService


# Process-wide singletons (single process, jobs kept in memory)
@lru_cache(maxsize=1)
def get_job_manager() -> JobManager:
    """Singleton JobManager - shared across all requests."""
    return JobManager()


@lru_cache(maxsize=1)
def get_analysis_service() -> AnalysisService:
    """Singleton AnalysisService."""
    return AnalysisService()
