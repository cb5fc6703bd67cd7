"""Pytest configuration and fixtures for Job Tracker tests."""

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="job-tracker-uploads-")
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""

from job_tracker.database import Base, Database, get_db
from job_tracker.dependencies import get_resume_storage
from job_tracker.main import app
from job_tracker.models import JobApplication, User
from job_tracker.services.auth import hash_password, create_access_token
from job_tracker.services.storage import LocalResumeStorage


# In-memory SQLite through the same engine setup the app uses
database = Database("sqlite://")


@pytest.fixture
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=database.engine)
    db = database.session()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def storage(tmp_path):
    """Resume storage writing into a per-test directory."""
    return LocalResumeStorage(
        upload_dir=tmp_path / "uploads",
        public_base_url="http://testserver/uploads",
        max_bytes=1024,
    )


@pytest.fixture
def client(db, storage):
    """Create a test client with database and storage dependency overrides."""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_resume_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db):
    """Create a password user."""
    user = User(
        display_name="Ann",
        email="ann@example.com",
        password_hash=hash_password("password123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def second_user(db):
    """Create a second user for isolation testing."""
    user = User(
        display_name="Bob",
        email="bob@example.com",
        password_hash=hash_password("password123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    """Bearer header for the first user."""
    token = create_access_token(data={"sub": str(test_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def second_user_headers(second_user):
    """Bearer header for the second user."""
    token = create_access_token(data={"sub": str(second_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def application_fields():
    """Wire-format fields for a complete application."""
    return {
        "jobTitle": "Eng",
        "company": "Acme",
        "description": "d",
        "dateApplied": "2024-01-01",
        "status": "applied",
        "jobPlatform": "LinkedIn",
        "jobUrl": "http://x",
    }


@pytest.fixture
def test_application(db, test_user):
    """An application owned by the first user."""
    application = JobApplication(
        user_id=test_user.id,
        job_title="Backend Engineer",
        company="Acme Corp",
        description="Python services",
        date_applied="2024-02-01",
        status="applied",
        job_platform="LinkedIn",
        job_url="https://example.com/jobs/1",
        resume_url="http://testserver/uploads/1/original.pdf",
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    return application
