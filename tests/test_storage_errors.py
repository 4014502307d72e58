from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.database import is_unique_violation, normalize_database_url
from app.core.exceptions import AlumniNotFound, DuplicateEmail, StorageError
from app.dependencies import get_alumni_service
from app.schemas import AlumniResponse
from app.services.alumni_service import AlumniService
from conftest import API, alumni_body


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO alumni ...", {}, Exception(message))


@pytest.mark.parametrize(
    "message",
    [
        'duplicate key value violates unique constraint "uq_alumni_email"',
        "(1062, \"Duplicate entry 'a@b.com' for key 'alumni.uq_alumni_email'\")",
        "UNIQUE constraint failed: alumni.email",
    ],
)
def test_unique_violation_on_email_is_recognised(message):
    assert is_unique_violation(_integrity_error(message), "email")


def test_other_integrity_errors_are_not_duplicates():
    not_null = _integrity_error("NOT NULL constraint failed: alumni.first_name")
    assert not is_unique_violation(not_null, "email")

    other_column = _integrity_error("UNIQUE constraint failed: alumni.phone")
    assert not is_unique_violation(other_column, "email")


def test_write_error_mapping():
    dup = AlumniService._write_error(
        _integrity_error("UNIQUE constraint failed: alumni.email"), "Failed to create alumni"
    )
    assert isinstance(dup, DuplicateEmail)

    other = AlumniService._write_error(
        _integrity_error("NOT NULL constraint failed: alumni.last_name"), "Failed to create alumni"
    )
    assert isinstance(other, StorageError)
    assert other.message == "Failed to create alumni"
    assert other.status_code == 500


def test_normalize_database_url():
    assert (
        normalize_database_url("postgresql://u:p@host/db?sslmode=require&channel_binding=require")
        == "postgresql+asyncpg://u:p@host/db?ssl=require"
    )
    assert normalize_database_url("postgresql://u:p@host/db?channel_binding=require") == (
        "postgresql+asyncpg://u:p@host/db"
    )
    assert normalize_database_url("sqlite+aiosqlite:///./alumni.db") == "sqlite+aiosqlite:///./alumni.db"


class _BrokenSession:
    """Session stand-in whose every statement fails like a dropped connection."""

    def add(self, instance):
        pass

    async def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("server has gone away"))

    execute = _fail
    flush = _fail

    async def commit(self):
        pass

    async def rollback(self):
        pass


@pytest.fixture
def broken_client(application, client):
    application.dependency_overrides[get_alumni_service] = lambda: AlumniService(_BrokenSession())
    yield client
    application.dependency_overrides.clear()


@pytest.mark.parametrize(
    "method, path, body, message",
    [
        ("get", API, None, "Failed to fetch alumni"),
        ("get", f"{API}/1", None, "Failed to fetch alumni"),
        ("post", API, alumni_body(), "Failed to create alumni"),
        ("put", f"{API}/1", alumni_body(), "Failed to update alumni"),
        ("delete", f"{API}/1", None, "Failed to delete alumni"),
        ("get", f"{API}/filters/options", None, "Failed to fetch filter options"),
    ],
)
def test_storage_failures_map_to_500(broken_client, method, path, body, message):
    kwargs = {"json": body} if body is not None else {}
    resp = getattr(broken_client, method)(path, **kwargs)
    assert resp.status_code == 500
    # Driver detail stays in the log
    assert resp.json() == {"error": message}


class _RereadFailsSession(_BrokenSession):
    """Write commits, then the re-read of the new row fails."""

    def __init__(self):
        self.rolled_back = False

    async def flush(self):
        pass

    async def refresh(self, instance):
        raise OperationalError("SELECT", {}, Exception("connection reset"))

    async def rollback(self):
        self.rolled_back = True


def test_failed_reread_after_create_is_not_rolled_back(application, client):
    session = _RereadFailsSession()
    application.dependency_overrides[get_alumni_service] = lambda: AlumniService(session)
    try:
        resp = client.post(API, json=alumni_body())
    finally:
        application.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch created alumni"}
    assert session.rolled_back is False


class _InvalidRowService:
    async def list_alumni(self, filters):
        # A row that does not fit the response model is a server fault
        return [AlumniResponse.model_validate({"id": 1})]


def test_response_validation_failure_is_500_not_422(application):
    application.dependency_overrides[get_alumni_service] = lambda: _InvalidRowService()
    with TestClient(application, raise_server_exceptions=False) as raw_client:
        resp = raw_client.get(API)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_domain_errors_fall_back_to_class_message():
    assert AlumniNotFound().message == "Alumni not found"
    assert AlumniNotFound(None).message == "Alumni not found"
    assert StorageError("Failed to fetch alumni").message == "Failed to fetch alumni"
