"""Pytest fixtures and configuration."""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from DB2ERD.config import AnalyzerSettings
from backend.config import settings
from backend.dependencies import get_analysis_service, get_job_manager
from backend.main import app
from backend.services.analysis_service import AnalysisService
from backend.utils.job_manager import JobManager


@pytest.fixture
def job_manager():
    """Fresh JobManager instance for testing."""
    return JobManager()


@pytest.fixture
def analysis_service():
    """AnalysisService with a long progress interval (no ticks in fast tests)."""
    return AnalysisService(AnalyzerSettings(progress_interval_seconds=60))


@pytest.fixture
def diagram_storage(tmp_path, monkeypatch):
    """Redirect diagram files to a temporary directory."""
    monkeypatch.setattr(settings, "er_diagram_storage_path", str(tmp_path))
    return tmp_path


@pytest.fixture
def client(job_manager, analysis_service, diagram_storage):
    """Test client for FastAPI app with per-test job state."""
    app.dependency_overrides[get_job_manager] = lambda: job_manager
    app.dependency_overrides[get_analysis_service] = lambda: analysis_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_job_id():
    """Sample job ID for testing."""
    return "test-job-12345-67890-abcdef"


@pytest.fixture
def sqlite_db(tmp_path):
    """Small SQLite database: customers <- orders, plus a dangling reference."""
    db_path = tmp_path / "shop.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        PRAGMA foreign_keys = OFF;
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL
        );
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER NOT NULL REFERENCES customers (id),
            warehouse_id INTEGER REFERENCES warehouses (id)
        );
        """
    )
    conn.commit()
    conn.close()
    return str(db_path)
