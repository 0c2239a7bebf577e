import pytest
from pydantic import ValidationError

from flux_review.core.config import Environment, Settings


def make(**overrides):
    return Settings(_env_file=None, **overrides)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, []),
        ("", []),
        ("Aman, Priya ,Riya", ["Aman", "Priya", "Riya"]),
        ('["Aman", "Priya"]', ["Aman", "Priya"]),
        ('"Aman"', ["Aman"]),
        ("Aman,,", ["Aman"]),
    ],
)
def test_allowed_reviewers_parsing(raw, expected):
    assert make(ALLOWED_REVIEWERS=raw).allowed_reviewers == expected


def test_database_uri_derived_from_postgres_parts():
    settings = make(
        POSTGRES_SERVER="db",
        POSTGRES_USER="flux",
        POSTGRES_PASSWORD="p@ss word",
        POSTGRES_DB="reviews",
    )
    assert settings.SQLALCHEMY_DATABASE_URI == "postgresql://flux:p%40ss+word@db:5432/reviews"


def test_database_uri_falls_back_to_sqlite():
    assert make().SQLALCHEMY_DATABASE_URI == "sqlite:///./flux_review.db"


def test_explicit_database_uri_wins():
    settings = make(SQLALCHEMY_DATABASE_URI="sqlite:///other.db", POSTGRES_SERVER="db")
    assert settings.SQLALCHEMY_DATABASE_URI == "sqlite:///other.db"


def test_rubric_weights_fill_defaults():
    settings = make(RUBRIC_WEIGHTS={"technicalSkills": 2})
    assert settings.RUBRIC_WEIGHTS == {
        "technicalSkills": 2.0,
        "communication": 1.0,
        "leadershipPotential": 1.0,
        "overallRating": 1.0,
    }


@pytest.mark.parametrize("weights", [{"charisma": 1.0}, {"communication": -1}])
def test_rubric_weights_rejected(weights):
    with pytest.raises(ValidationError):
        make(RUBRIC_WEIGHTS=weights)


def test_negative_port_attempts_rejected():
    with pytest.raises(ValidationError):
        make(PORT_BIND_ATTEMPTS=-1)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "5055")
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("ALLOWED_REVIEWERS", "Ananya")
    settings = make()
    assert settings.SERVER_PORT == 5055
    assert settings.is_production
    assert not settings.is_development
    assert settings.ENVIRONMENT is Environment.PRODUCTION
    assert settings.allowed_reviewers == ["Ananya"]
