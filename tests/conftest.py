from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'app.main'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


API = "/api/v1/alumni"


@pytest.fixture
def test_settings(tmp_path):
    from app.core.config import Settings

    return Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'alumni.db'}")


@pytest.fixture
def application(test_settings):
    from app.main import create_application

    return create_application(test_settings)


@pytest.fixture
def client(application):
    from fastapi.testclient import TestClient

    # Entering the client runs the lifespan, which creates the table
    with TestClient(application) as test_client:
        yield test_client


def alumni_body(**overrides: Any) -> Dict[str, Any]:
    body = {
        "first_name": "Asha",
        "last_name": "Rao",
        "email": "asha.rao@example.com",
        "phone": "9876543210",
        "graduation_year": 2020,
        "degree": "B.Tech",
        "branch": "CS",
        "current_company": "Acme",
        "current_position": "Engineer",
        "location": "Pune",
    }
    body.update(overrides)
    return body


@pytest.fixture
def create_alumni(client):
    def _create(**overrides: Any) -> Dict[str, Any]:
        resp = client.post(API, json=alumni_body(**overrides))
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
