"""
Shared test fixtures and configuration for HR Personnel Service tests.
"""
import os
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from cryptography.fernet import Fernet

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["KAFKA_ENABLED"] = "false"
os.environ["HR_ADMIN_EMAIL"] = "hr-admin@example.com"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from app.core.database import engine  # noqa: E402
from app.core.encryption import get_encryptor  # noqa: E402
from app.core.record_store import RecordStore  # noqa: E402
from app.main import app  # noqa: E402
from app.services.change_detector import ChangeDetector  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    """Fresh in-memory tables for every test."""
    SQLModel.metadata.create_all(engine)
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(database):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session) -> RecordStore:
    return RecordStore(session)


@pytest.fixture
def encryptor():
    return get_encryptor()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def employee_payload() -> dict[str, Any]:
    return {
        "firstName": "Jane",
        "lastName": "Doe",
        "nationalId": "ID-4451-22",
        "dateOfBirth": "04/15/1990",
        "age": 34,
        "gender": "Female",
        "nationality": "Kenyan",
        "maritalStatus": "Single",
        "email": "jane.doe@example.com",
        "phone": "+254700000001",
        "address": "1 Moi Avenue",
        "city": "Nairobi",
        "state": "Nairobi County",
        "postalCode": "00100",
        "country": "Kenya",
        "emergencyContact": {
            "name": "John Doe",
            "phone": "+254700000002",
            "relationship": "Brother",
        },
        "role": "Engineer",
        "department": "Engineering",
        "jobLevel": "L3",
        "contractType": "Permanent",
        "salaryGrade": "G5",
        "salaryPay": 5000,
    }


@pytest.fixture
def create_employee(client, employee_payload) -> Callable[..., str]:
    """Create an employee through the API and return its id."""

    def _create(**overrides: Any) -> str:
        response = client.post("/api/v1/employees", json={**employee_payload, **overrides})
        assert response.status_code == 201, response.text
        return response.json()["employeeId"]

    return _create


@pytest.fixture
def mock_mailer():
    return MagicMock()


@pytest.fixture
def published():
    """Publisher stand-in recording (topic, envelope, key) tuples."""
    events = []

    def _publish(topic, event, key=None):
        events.append((topic, event, key))

    _publish.events = events
    return _publish


@pytest.fixture
def detector(store, published) -> ChangeDetector:
    return ChangeDetector(store, publisher=published)
