"""Analysis service - runs DB2ERD analyses as background jobs."""

import logging
import time
from pathlib import Path
from typing import Optional

from DB2ERD.analysis import DbAnalyzer, ProgressEvent
from DB2ERD.config import AnalyzerSettings, load_settings
from DB2ERD.ir.models import ERDDataModel
from DB2ERD.sources import ConnectionOptions, RowSource
from DB2ERD.utils.error_handling import create_error_response
from DB2ERD.writers import GraphvizModelWriter

from backend.config import settings as backend_settings
from backend.utils.job_manager import JobManager

logger = logging.getLogger(__name__)


class AnalysisService:
    """Wraps DbAnalyzer and records progress events on the job."""

    def __init__(self, analyzer_settings: Optional[AnalyzerSettings] = None):
        self.analyzer_settings = analyzer_settings

    def _settings(self) -> AnalyzerSettings:
        if self.analyzer_settings is None:
            self.analyzer_settings = load_settings(backend_settings.db2erd_config_path)
        return self.analyzer_settings

    async def run_analysis(
        self,
        job_id: str,
        options: ConnectionOptions,
        job_manager: JobManager,
        model_name: Optional[str] = None,
        write_diagram: bool = False,
        row_source: Optional[RowSource] = None,
    ):
        """
        Run one analysis and store its outcome on the job.

        Failures are recorded on the job (status "failed" plus an error
        payload) instead of being raised; this runs as a background task.
        """
        start_time = time.time()
        logger.info(f"Job {job_id}: analysis of {options.describe()} started")
        job_manager.update_job(job_id, status="in_progress")

        settings = self._settings()
        model = ERDDataModel(name=model_name or settings.model_name)

        diagram_path = None
        if write_diagram:
            diagram_dir = Path(backend_settings.er_diagram_storage_path) / "er_diagrams"
            diagram_path = str(diagram_dir / f"er_diagram_{job_id}.gv")
        writer = GraphvizModelWriter(output_path=diagram_path)

        def record(event: ProgressEvent):
            job_manager.add_event(job_id, event.model_dump(mode="json"))

        try:
            analyzer = DbAnalyzer(options, model, row_source=row_source, writer=writer, settings=settings)
            report = await analyzer.run(record)
        except Exception as e:
            logger.error(f"Job {job_id}: analysis failed: {e}")
            job_manager.update_job(job_id, status="failed", error=create_error_response(e)["error"])
            return

        job_manager.set_result(job_id, {
            "model": model.to_snapshot().model_dump(mode="json"),
            "report": report.model_dump(mode="json"),
            "diagram_source": writer.source,
            "diagram_path": writer.written_path,
        })
        job_manager.update_job(job_id, status="completed")
        logger.info(f"Job {job_id}: completed in {time.time() - start_time:.3f} seconds")
