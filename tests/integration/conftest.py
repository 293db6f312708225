"""
Fixtures for API tests.

Each test gets a fresh in-memory SQLite database shared across sessions
through a single static connection, and a TestClient whose database
dependency points at it.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from crewledger.fastapi import models  # noqa: F401
from crewledger.fastapi.core.config import Settings
from crewledger.fastapi.dependencies.database import Base, build_engine, get_sync_db
from crewledger.fastapi.main import create_app


TEST_DATABASE_URL = "sqlite://"


@pytest.fixture
def test_engine():
    """Create an in-memory engine with all tables."""
    engine = build_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    session_factory = sessionmaker(bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False)
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(DATABASE_URL=TEST_DATABASE_URL, LOG_LEVEL="WARNING", ENABLE_BULK_GENERATE=True)


@pytest.fixture
def client(test_engine, settings):
    session_factory = sessionmaker(bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False)

    def override_get_sync_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = create_app(settings)
    app.dependency_overrides[get_sync_db] = override_get_sync_db

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_employee(client):
    def _create(name="Ayu", position="Picker", status="Active"):
        response = client.post("/api/v1/employees/", json={"name": name, "position": position, "status": status})
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def create_rate(client):
    def _create(task_name="Harvest", rate="10"):
        response = client.post("/api/v1/piece-rates/", json={"task_name": task_name, "rate": rate})
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def save_log(client):
    def _save(log_date, tasks=(), present=(), custom_tasks=()):
        return client.put(
            f"/api/v1/daily-logs/date/{log_date}",
            json={
                "tasks": list(tasks),
                "custom_tasks": list(custom_tasks),
                "present_employee_ids": list(present),
            },
        )
    return _save


@pytest.fixture
def harvest_day(create_employee, create_rate, save_log):
    """Employees A, B and C; A and B harvest 20 units at rate 10 on 2024-03-05."""
    crew = {key: create_employee(name) for key, name in (("A", "Ayu"), ("B", "Budi"), ("C", "Citra"))}
    rate = create_rate()
    response = save_log(
        "2024-03-05",
        tasks=[{"piece_rate_id": rate["id"], "quantity": "20"}],
        present=[crew["A"]["id"], crew["B"]["id"]],
    )
    assert response.status_code == 200, response.text
    return {"crew": crew, "rate": rate, "log": response.json()}
