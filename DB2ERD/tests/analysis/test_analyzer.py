"""Tests for the analyzer run loop (progress, guard, failures, writer)."""

import asyncio
import time

import pytest

from DB2ERD.analysis import DbAnalyzer, ProgressEvent, ProgressReporter, analyze
from DB2ERD.analysis.analyzer import (
    CANCELLED_MESSAGE,
    FINISHED_MESSAGE,
    IN_PROGRESS_MESSAGE,
    STARTED_MESSAGE,
)
from DB2ERD.ir.models import ERDDataModel
from DB2ERD.sources import StaticRowSource
from DB2ERD.utils.error_handling import ConcurrentAnalysisError, RowSourceError


class SlowRowSource:
    """Yields rows with a pause before each one."""

    catalog_query = ""

    def __init__(self, rows, delay=0.05):
        self.rows = rows
        self.delay = delay

    async def execute(self, query, params):
        for row in self.rows:
            await asyncio.sleep(self.delay)
            yield row


class FailingRowSource:
    """Yields some rows, then fails like a dropped connection."""

    catalog_query = ""

    def __init__(self, rows, fail_after):
        self.rows = rows
        self.fail_after = fail_after

    async def execute(self, query, params):
        for index, row in enumerate(self.rows):
            if index == self.fail_after:
                raise RowSourceError(message="connection lost")
            yield row


class RecordingWriter:
    def __init__(self):
        self.models = []

    def generate_model(self, model):
        self.models.append(model)


class BlockingWriter(RecordingWriter):
    """Renders synchronously for a while, like graphviz writing a large file."""

    def __init__(self, seconds):
        super().__init__()
        self.seconds = seconds

    def generate_model(self, model):
        time.sleep(self.seconds)
        super().generate_model(model)


class TestProgressEvents:
    """Test the notifications sent during a run."""

    @pytest.mark.asyncio
    async def test_successful_run_reports_start_and_finish(self, scenario_rows, model, settings):
        events = []
        analyzer = DbAnalyzer(None, model, row_source=StaticRowSource(scenario_rows), settings=settings)

        report = await analyzer.run(events.append)

        assert events[0].message == STARTED_MESSAGE
        assert events[-1].message == FINISHED_MESSAGE
        assert all(event.severity == "info" for event in events)
        assert report.relationships == 1

    @pytest.mark.asyncio
    async def test_slow_run_reports_progress(self, scenario_rows, model, settings):
        events = []
        source = SlowRowSource(scenario_rows, delay=0.08)
        analyzer = DbAnalyzer(None, model, row_source=source, settings=settings)

        await analyzer.run(events.append)

        messages = [event.message for event in events]
        assert IN_PROGRESS_MESSAGE in messages
        assert messages[0] == STARTED_MESSAGE
        assert messages[-1] == FINISHED_MESSAGE

    @pytest.mark.asyncio
    async def test_slow_writer_reports_progress(self, scenario_rows, model, settings):
        events = []
        writer = BlockingWriter(seconds=0.2)
        analyzer = DbAnalyzer(
            None, model, row_source=StaticRowSource(scenario_rows), writer=writer, settings=settings
        )

        await analyzer.run(events.append)

        messages = [event.message for event in events]
        assert IN_PROGRESS_MESSAGE in messages
        assert messages[-1] == FINISHED_MESSAGE
        assert writer.models == [model]

    @pytest.mark.asyncio
    async def test_no_progress_after_finish(self, scenario_rows, model, settings):
        events = []
        analyzer = DbAnalyzer(None, model, row_source=StaticRowSource(scenario_rows), settings=settings)

        await analyzer.run(events.append)
        count = len(events)
        await asyncio.sleep(settings.progress_interval_seconds * 3)

        assert len(events) == count

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self, scenario_rows, model, settings):
        events = []

        async def on_progress(event: ProgressEvent):
            await asyncio.sleep(0)
            events.append(event)

        analyzer = DbAnalyzer(None, model, row_source=StaticRowSource(scenario_rows), settings=settings)
        await analyzer.run(on_progress)

        assert [e.message for e in events] == [STARTED_MESSAGE, FINISHED_MESSAGE]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_abort_run(self, scenario_rows, model, settings):
        def on_progress(event):
            raise RuntimeError("listener went away")

        analyzer = DbAnalyzer(None, model, row_source=StaticRowSource(scenario_rows), settings=settings)
        report = await analyzer.run(on_progress)

        assert report.entities == 2
        assert model.find_entity("orders") is not None

    @pytest.mark.asyncio
    async def test_reporter_without_callback(self):
        reporter = ProgressReporter()
        await reporter.notify("info", "nothing listens")


class TestFailures:
    """Test how a run fails."""

    @pytest.mark.asyncio
    async def test_row_source_failure_is_reported_and_raised(self, scenario_rows, model, settings):
        events = []
        writer = RecordingWriter()
        source = FailingRowSource(scenario_rows, fail_after=2)
        analyzer = DbAnalyzer(None, model, row_source=source, writer=writer, settings=settings)

        with pytest.raises(RowSourceError):
            await analyzer.run(events.append)

        assert events[-1].severity == "error"
        assert events[-1].message == "Error occurred! connection lost"
        assert FINISHED_MESSAGE not in [e.message for e in events]
        assert writer.models == []
        # Whatever was built before the failure stays in the model
        assert [e.name for e in model.entities] == ["customers", "orders"]

    @pytest.mark.asyncio
    async def test_cancelled_run_reports_cancellation(self, scenario_rows, model, settings):
        events = []
        source = SlowRowSource(scenario_rows, delay=1.0)
        analyzer = DbAnalyzer(None, model, row_source=source, settings=settings)

        task = asyncio.create_task(analyzer.run(events.append))
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert events[-1].message == CANCELLED_MESSAGE
        assert events[-1].severity == "error"

    def test_requires_options_or_row_source(self, model, settings):
        with pytest.raises(ValueError):
            DbAnalyzer(None, model, settings=settings)


class TestSingleWriter:
    """Test that one model is written by one run at a time."""

    @pytest.mark.asyncio
    async def test_concurrent_run_on_same_model_is_rejected(self, scenario_rows, model, settings):
        slow = DbAnalyzer(None, model, row_source=SlowRowSource(scenario_rows), settings=settings)
        second = DbAnalyzer(None, model, row_source=StaticRowSource(scenario_rows), settings=settings)

        task = asyncio.create_task(slow.run())
        await asyncio.sleep(0.01)
        with pytest.raises(ConcurrentAnalysisError):
            await second.run()
        await task

        assert len(model.entities) == 2

    @pytest.mark.asyncio
    async def test_model_is_released_after_failure(self, scenario_rows, model, settings):
        failing = DbAnalyzer(None, model, row_source=FailingRowSource(scenario_rows, 0), settings=settings)
        with pytest.raises(RowSourceError):
            await failing.run()

        ok = DbAnalyzer(None, model, row_source=StaticRowSource(scenario_rows), settings=settings)
        report = await ok.run()

        assert report.entities == 2

    @pytest.mark.asyncio
    async def test_separate_models_run_concurrently(self, scenario_rows, settings):
        first, second = ERDDataModel(name="first"), ERDDataModel(name="second")

        await asyncio.gather(
            analyze(None, first, row_source=SlowRowSource(scenario_rows, 0.01), settings=settings),
            analyze(None, second, row_source=SlowRowSource(scenario_rows, 0.01), settings=settings),
        )

        assert first.to_snapshot().entities == second.to_snapshot().entities


class TestAnalyzeFunction:
    """Test the module-level analyze() entry point."""

    @pytest.mark.asyncio
    async def test_creates_model_from_settings(self, scenario_rows, settings):
        settings.model_name = "Shop"
        model = await analyze(None, row_source=StaticRowSource(scenario_rows), settings=settings)

        assert model.name == "Shop"
        assert [e.name for e in model.entities] == ["customers", "orders"]

    @pytest.mark.asyncio
    async def test_writer_receives_finished_model(self, forward_rows, model, settings):
        writer = RecordingWriter()
        result = await analyze(
            None, model, row_source=StaticRowSource(forward_rows), writer=writer, settings=settings
        )

        assert result is model
        assert writer.models == [model]
        assert model.find_entity("invoice_lines").find_relationship("fk_lines_product") is not None
