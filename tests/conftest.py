# tests/conftest.py
import os

import pytest

os.environ.setdefault("ENV", "dev")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.db import db_manager, init_database
from app.main import app


@pytest.fixture
def app_paths(tmp_path, monkeypatch):
    """Point the database, backups and uploads at a fresh temporary directory"""
    monkeypatch.setattr(settings, "DATABASE_PATH", tmp_path / "database.sqlite")
    monkeypatch.setattr(settings, "BACKUP_DIR", tmp_path / "backups")
    monkeypatch.setattr(settings, "UPLOAD_DIR", tmp_path / "uploads")
    db_manager.close()
    yield tmp_path
    db_manager.close()


@pytest.fixture
def client(app_paths):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app_paths):
    init_database()
    session = db_manager.get_session_factory()()
    yield session
    session.close()


@pytest.fixture
def make_student(client):
    """Admit a student through the API and return the JSON body"""

    def _make(**overrides):
        data = {
            "name": "Ravi Kumar",
            "father_name": "Suresh Kumar",
            "course": "DCA",
            "contact_number": "9876543210",
            "address": "12 Station Road",
            "admission_date": "2024-01-10",
        }
        data.update(overrides)
        response = client.post("/api/students/", data=data)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_payment(client):
    def _make(student_id, month="January", year=2024, amount="500", **extra):
        payload = {"student_id": student_id, "month": month, "year": year, "amount": amount}
        payload.update(extra)
        response = client.post("/api/fees/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
