from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from flux_review.db.base import Base

ROLL_NO_MAX_LENGTH = 64
RATER_MAX_LENGTH = 128


class ScoreRecord(Base):
    __tablename__ = "candidate_scores"

    id = Column(Integer, primary_key=True, index=True)
    roll_no = Column(String(ROLL_NO_MAX_LENGTH), nullable=False)
    points = Column(Float, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("roll_no", name="uq_candidate_scores_roll_no"),
        Index("idx_candidate_scores_points", "points"),
    )

    def __repr__(self) -> str:
        return f"<ScoreRecord {self.roll_no}={self.points}>"


class ScoreRating(Base):
    """Append-only log of accepted contributions; doubles as the raters set."""

    __tablename__ = "candidate_score_ratings"

    id = Column(Integer, primary_key=True, index=True)
    roll_no = Column(String(ROLL_NO_MAX_LENGTH), ForeignKey("candidate_scores.roll_no"), nullable=False, index=True)
    rater = Column(String(RATER_MAX_LENGTH), nullable=True, index=True)  # NULL for anonymous submissions
    points = Column(Float, nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("roll_no", "rater", name="uq_candidate_score_ratings_roll_rater"),
    )
