"""Tests for AnalysisService."""

import asyncio

import pytest

from DB2ERD.sources import ConnectionOptions, StaticRowSource


def row(table, column, ordinal, **fields):
    data = {"table_name": table, "column_name": column, "ordinal_position": ordinal}
    data.update(fields)
    return data


@pytest.fixture
def rows():
    return [
        row("authors", "id", 1, is_primary_key=1, is_nullable=0),
        row("books", "id", 1, is_primary_key=1, is_nullable=0),
        row("books", "author_id", 2, is_foreign_key=1, foreign_key_name="fk_books_author",
            referenced_table_name="authors", referenced_column_name="id"),
    ]


@pytest.mark.asyncio
async def test_run_analysis_stores_result(analysis_service, job_manager, rows, sqlite_db):
    options = ConnectionOptions(engine="sqlite", path=sqlite_db)
    job_manager.create_job("job", options.describe())

    await analysis_service.run_analysis(
        "job", options, job_manager, model_name="Library", row_source=StaticRowSource(rows)
    )

    job = job_manager.get_job("job")
    assert job["status"] == "completed"
    assert job["result"]["model"]["name"] == "Library"
    assert job["result"]["report"]["relationships"] == 1
    relationship = job["result"]["model"]["entities"][1]["relationships"][0]
    assert relationship["name"] == "fk_books_author"
    assert relationship["to_cardinality"] == "0..1"
    assert [e["severity"] for e in job["events"]] == ["info", "info"]


@pytest.mark.asyncio
async def test_run_analysis_records_failure(analysis_service, job_manager, rows, sqlite_db):
    bad_rows = rows + [row("authors", "name", 2)]
    options = ConnectionOptions(engine="sqlite", path=sqlite_db)
    job_manager.create_job("job", options.describe())

    await analysis_service.run_analysis("job", options, job_manager, row_source=StaticRowSource(bad_rows))

    job = job_manager.get_job("job")
    assert job["status"] == "failed"
    assert job["result"] is None
    assert job["error"]["error_type"] == "non_contiguous_rows"
    assert job["error"]["table_name"] == "authors"


@pytest.mark.asyncio
async def test_parallel_jobs_use_separate_models(analysis_service, job_manager, rows, sqlite_db):
    options = ConnectionOptions(engine="sqlite", path=sqlite_db)
    for job_id in ("a", "b"):
        job_manager.create_job(job_id, options.describe())

    await asyncio.gather(
        analysis_service.run_analysis("a", options, job_manager, row_source=StaticRowSource(rows)),
        analysis_service.run_analysis("b", options, job_manager, row_source=StaticRowSource(rows)),
    )

    assert job_manager.get_job("a")["status"] == "completed"
    assert job_manager.get_job("b")["status"] == "completed"
