import json

import pytest
from fastapi.testclient import TestClient

from flux_review.core.config import Settings
from flux_review.db.base import Base
from flux_review.db.session import create_db_engine, create_session_factory
from flux_review.main import create_application


APPLICATIONS = [
    {"name": "Riya Sharma", "rollNo": "R1", "branch": "CSE", "year": "2nd", "imageUrl": "https://img/r1.jpg"},
    {"name": "Aarav Gupta", "rollNo": "R2", "branch": "ECE", "year": "2nd", "imageUrl": ""},
    {"name": "Meera Iyer", "rollNo": "R3", "branch": "IT", "year": "3rd"},
    {"name": "No Roll", "branch": "ME"},
]


@pytest.fixture
def applications_path(tmp_path):
    path = tmp_path / "applications.json"
    path.write_text(json.dumps(APPLICATIONS), encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path, applications_path):
    return Settings(
        _env_file=None,
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'scores.db'}",
        APPLICATIONS_PATH=str(applications_path),
        ALLOWED_REVIEWERS="Aman,Priya,Riya",
    )


@pytest.fixture
def client(settings):
    app = create_application(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
