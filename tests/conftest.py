"""
Shared pytest fixtures for all tests.

Provides stores for each backend, a FastAPI TestClient bound to a
temporary local store, and small helpers for building form payloads.
"""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure test environment before the application reads its configuration
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("APPOINTMENT_EDIT_CHECKS", "skip")
os.environ.setdefault("OVERLAP_READ_FAILURE", "propagate")

from terminplaner import config  # noqa: E402
from terminplaner.database import Base  # noqa: E402
from terminplaner.main import app  # noqa: E402
from terminplaner.storage import get_store  # noqa: E402
from terminplaner.storage.local import LocalFileStore  # noqa: E402
from terminplaner.storage.sql import SqlStore  # noqa: E402


# ============================================================================
# STORE FIXTURES
# ============================================================================


@pytest.fixture
def local_store(tmp_path) -> LocalFileStore:
    """Empty JSON file store in a temporary directory."""
    return LocalFileStore(str(tmp_path / "terminplaner.json"))


@pytest.fixture
def sql_store():
    """SQL store on a private in-memory SQLite database."""
    from terminplaner import models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    store = SqlStore(session)
    yield store
    store.close()
    engine.dispose()


@pytest.fixture(params=["local", "sql"])
def store(request):
    """Run a test once per in-process backend."""
    return request.getfixturevalue(f"{request.param}_store")


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def client(local_store):
    """TestClient whose routes use the temporary local store."""
    app.dependency_overrides[get_store] = lambda: local_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def enforce_edit_checks(monkeypatch):
    """Validate edits the same way as creates."""
    monkeypatch.setattr(config, "APPOINTMENT_EDIT_CHECKS", "enforce")


# ============================================================================
# PAYLOAD HELPERS
# ============================================================================


def appointment_form(
    title="Consultation",
    start_date="2024-01-01",
    start_time="10:00",
    end_date="2024-01-01",
    end_time="11:00",
    status="planned",
    **extra,
) -> dict:
    return {
        "title": title,
        "startDate": start_date,
        "startTime": start_time,
        "endDate": end_date,
        "endTime": end_time,
        "status": status,
        **extra,
    }


def customer_form(last_name="Müller", first_name="Anna", **extra) -> dict:
    payload = {
        "title": "Dr.",
        "lastName": last_name,
        "firstName": first_name,
        "birthDate": "1985-04-12",
        "street": "Hauptstraße 1",
        "zip": "10115",
        "city": "Berlin",
        "phone": "030 123456",
        "mobile": "0170 123456",
        "email": "anna.mueller@example.de",
        "website": "",
    }
    payload.update(extra)
    return payload
