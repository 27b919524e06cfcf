import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import formintake.models  # noqa: F401
from formintake.config import get_settings
from formintake.database import Base, configure_sqlite, get_db
from formintake.main import app
from formintake.models.template import FormTemplate


TWO_PAGE_STRUCTURE = {
    "formName": "Benefits Enrollment",
    "description": "Enrollment form used in tests",
    "pages": [
        {
            "pageNumber": 1,
            "title": "Personal Details",
            "fields": [
                {"id": "fullName", "type": "text", "label": "Full Name", "required": True},
                {"id": "email", "type": "email", "label": "Email Address", "required": True},
                {
                    "id": "department",
                    "type": "select",
                    "label": "Department",
                    "validation": {"options": ["Finance", "IT", "Other"]},
                },
            ],
        },
        {
            "pageNumber": 2,
            "title": "Coverage",
            "fields": [
                {
                    "id": "coverage",
                    "type": "checkbox",
                    "label": "Coverage Types",
                    "required": True,
                    "validation": {"options": ["Medical", "Dental", "Vision"]},
                },
                {"id": "agreement", "type": "checkbox", "label": "I agree", "required": True},
                {"id": "comments", "type": "textarea", "label": "Comments"},
            ],
        },
    ],
}

COMPLETE_ANSWERS = {
    "fullName": "Ada Lovelace",
    "email": "ada@example.com",
    "coverage": ["Medical", "Vision"],
    "agreement": True,
}

CLIENT_HEADERS = {"X-User-Id": "client1", "X-User-Role": "client"}
STAFF_HEADERS = {"X-User-Id": "admin", "X-User-Role": "administrator"}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def settings(monkeypatch):
    """Application settings with the reviewer list pinned for tests."""
    settings = get_settings()
    monkeypatch.setattr(settings, "default_reviewers", "admin,reviewer1")
    monkeypatch.setattr(settings, "allow_return_from_submitted", True)
    return settings


@pytest.fixture()
def structure_json():
    return json.dumps(TWO_PAGE_STRUCTURE)


@pytest.fixture()
def template(db, structure_json):
    template = FormTemplate(
        name="Benefits Enrollment",
        description="Enrollment form used in tests",
        structure_json=structure_json,
        total_pages=2,
        created_by="admin",
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return template
