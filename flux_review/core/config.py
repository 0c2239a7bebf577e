from typing import Dict, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
import json
from urllib.parse import quote_plus
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


RUBRIC_CRITERIA = (
    "technicalSkills",
    "communication",
    "leadershipPotential",
    "overallRating",
)


class Settings(BaseSettings):
    # Environment Configuration
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Project Information
    PROJECT_NAME: str = "Flux Review"
    VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"

    # Server settings
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 4000
    PORT_BIND_ATTEMPTS: int = 5  # extra ports tried after SERVER_PORT
    PORT_RETRY_DELAY_SECONDS: float = 0.5

    # Database - PostgreSQL in deployments, SQLite locally
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None
    AUTO_CREATE_TABLES: bool = True

    # Candidate directory (static applications export)
    APPLICATIONS_PATH: str = "data/applications.json"

    # Reviewers: JSON list or comma-separated names; empty accepts any rater
    ALLOWED_REVIEWERS: Optional[str] = None

    # Per-criterion multipliers for the scoring rubric
    RUBRIC_WEIGHTS: Dict[str, float] = {name: 1.0 for name in RUBRIC_CRITERIA}

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Observability
    METRICS_ENABLED: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    SLOW_REQUEST_MS: int = 2000

    # --- Validators & Derived Settings ---
    @field_validator("RUBRIC_WEIGHTS")
    @classmethod
    def _complete_rubric_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        unknown = sorted(set(v) - set(RUBRIC_CRITERIA))
        if unknown:
            raise ValueError(f"Unknown rubric criteria: {unknown}")
        if any(weight < 0 for weight in v.values()):
            raise ValueError("Rubric weights must be non-negative")
        # Unspecified criteria keep the default weight
        return {name: float(v.get(name, 1.0)) for name in RUBRIC_CRITERIA}

    @field_validator("PORT_BIND_ATTEMPTS")
    @classmethod
    def _non_negative_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("PORT_BIND_ATTEMPTS must be >= 0")
        return v

    @model_validator(mode="after")
    def _finalize_database_uri(self) -> "Settings":
        # Derive SQLALCHEMY_DATABASE_URI if not provided
        if not self.SQLALCHEMY_DATABASE_URI:
            user = self.POSTGRES_USER
            server = self.POSTGRES_SERVER
            db = self.POSTGRES_DB
            if user and server and db:
                safe_user = quote_plus(user)
                if self.POSTGRES_PASSWORD:
                    safe_password = quote_plus(self.POSTGRES_PASSWORD)
                    self.SQLALCHEMY_DATABASE_URI = (
                        f"postgresql://{safe_user}:{safe_password}@{server}:{self.POSTGRES_PORT}/{db}"
                    )
                else:
                    self.SQLALCHEMY_DATABASE_URI = (
                        f"postgresql://{safe_user}@{server}:{self.POSTGRES_PORT}/{db}"
                    )
            else:
                self.SQLALCHEMY_DATABASE_URI = "sqlite:///./flux_review.db"
        return self

    @property
    def allowed_reviewers(self) -> List[str]:
        raw = (self.ALLOWED_REVIEWERS or "").strip()
        if not raw:
            return []
        try:
            names = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            # Fallback: treat as comma-separated string
            names = raw.split(",")
        if not isinstance(names, list):
            names = [names]
        return [str(name).strip() for name in names if str(name).strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


def get_settings() -> Settings:
    return Settings()
