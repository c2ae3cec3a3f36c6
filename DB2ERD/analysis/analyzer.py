"""Database schema analyzer - the caller-facing unit of work.

``analyze`` reads the catalog through a row source, resolves it into an
``ERDDataModel`` and hands the result to a model writer. While it runs it emits
progress notifications (``{severity, message}``) to an optional callback.

A partially built model is left as it is when the run fails; callers that need
atomicity must wrap the run in their own transaction.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import weakref
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from DB2ERD.config import AnalyzerSettings, load_settings
from DB2ERD.ir.models import ERDDataModel
from DB2ERD.sources import ConnectionOptions, RowSource, create_row_source
from DB2ERD.utils.error_handling import (
    AnalysisContext,
    ConcurrentAnalysisError,
    ERDError,
    log_error_with_context,
)
from DB2ERD.utils.logging import get_logger
from DB2ERD.writers import ModelWriter, NullModelWriter

from .resolver import ResolutionReport, SchemaResolver

logger = get_logger(__name__)

STARTED_MESSAGE = "ER Data Model generation has been started. Please wait..."
IN_PROGRESS_MESSAGE = "ER Data Model generation is in progress..."
FINISHED_MESSAGE = "ER Data Model generation has been finished."
CANCELLED_MESSAGE = "ER Data Model generation has been cancelled."
ERROR_MESSAGE = "Error occurred!"

# Models currently being written by a run (single writer per model)
_active_models: "weakref.WeakSet[ERDDataModel]" = weakref.WeakSet()


class ProgressEvent(BaseModel):
    """Progress notification sent to the caller."""
    severity: Literal["info", "error"] = "info"
    message: str
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))


ProgressCallback = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


class ProgressReporter:
    """Best-effort delivery of progress events; failures never reach the run."""

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback

    async def notify(self, severity: str, message: str) -> None:
        event = ProgressEvent(severity=severity, message=message)
        if severity == "error":
            logger.error(message)
        else:
            logger.info(message)
        if self.callback is None:
            return
        try:
            result = self.callback(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    async def tick(self, interval: float) -> None:
        """Emit an in-progress notification every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.notify("info", IN_PROGRESS_MESSAGE)


class DbAnalyzer:
    """Analyzes the tables and foreign keys of one database into a model."""

    def __init__(
        self,
        options: Optional[ConnectionOptions],
        model: ERDDataModel,
        row_source: Optional[RowSource] = None,
        writer: Optional[ModelWriter] = None,
        settings: Optional[AnalyzerSettings] = None,
    ):
        if options is None and row_source is None:
            raise ValueError("Either connection options or a row source is required")
        self.options = options
        self.model = model
        self.settings = settings or load_settings()
        self.row_source = row_source or create_row_source(options)
        self.writer = writer or NullModelWriter()
        self.resolver = SchemaResolver(
            model, enforce_contiguous_tables=self.settings.enforce_contiguous_tables
        )

    async def analyze(self) -> ResolutionReport:
        """Resolve the catalog into the model, then run the model writer."""
        query = self.row_source.catalog_query
        params = self.options.catalog_params() if self.options else {}
        if self.options:
            logger.info(f"Analyzing {self.options.describe()}")

        async with contextlib.aclosing(self.row_source.execute(query, params)) as rows:
            report = await self.resolver.resolve(rows)

        # Writers render files synchronously; keep the ticker running meanwhile
        await asyncio.to_thread(self.writer.generate_model, self.model)
        return report

    async def run(self, on_progress: Optional[ProgressCallback] = None) -> ResolutionReport:
        """
        Run ``analyze`` as one unit of work with progress notifications.

        Args:
            on_progress: Called with a ProgressEvent; may be a coroutine function

        Returns:
            ResolutionReport: What the run added to the model

        Raises:
            ConcurrentAnalysisError: Another run is writing the same model
            ERDError: Precondition or row source failures
        """
        if self.model in _active_models:
            raise ConcurrentAnalysisError(
                message=f"Model '{self.model.name}' is already being analyzed",
            )
        _active_models.add(self.model)

        reporter = ProgressReporter(on_progress)
        await reporter.notify("info", STARTED_MESSAGE)
        ticker = asyncio.create_task(reporter.tick(self.settings.progress_interval_seconds))
        try:
            report = await self.analyze()
        except asyncio.CancelledError:
            await reporter.notify("error", CANCELLED_MESSAGE)
            raise
        except Exception as e:
            context = e.context if isinstance(e, ERDError) else AnalysisContext()
            log_error_with_context(e, context)
            await reporter.notify("error", f"{ERROR_MESSAGE} {e}")
            raise
        finally:
            ticker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticker
            _active_models.discard(self.model)

        await reporter.notify("info", FINISHED_MESSAGE)
        return report


async def analyze(
    options: Optional[ConnectionOptions],
    model: Optional[ERDDataModel] = None,
    *,
    on_progress: Optional[ProgressCallback] = None,
    row_source: Optional[RowSource] = None,
    writer: Optional[ModelWriter] = None,
    settings: Optional[AnalyzerSettings] = None,
) -> ERDDataModel:
    """
    Analyze all columns of tables and their relationships under the given database.

    Args:
        options: Connection options (may be None when ``row_source`` is given)
        model: Model to populate; a new one is created when None
        on_progress: Optional progress callback
        row_source: Override the row source picked from ``options.engine``
        writer: Model writer run after resolution
        settings: Analyzer settings; loaded from config.yaml and env when None

    Returns:
        ERDDataModel: The populated model
    """
    settings = settings or load_settings()
    if model is None:
        model = ERDDataModel(name=settings.model_name)

    analyzer = DbAnalyzer(options, model, row_source=row_source, writer=writer, settings=settings)
    await analyzer.run(on_progress)
    return model
