from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from flux_review.core.config import Settings
from flux_review.services.directory import CandidateDirectory


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_directory(request: Request) -> CandidateDirectory:
    return request.app.state.directory
