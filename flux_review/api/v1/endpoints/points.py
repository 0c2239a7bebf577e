import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flux_review.api import deps
from flux_review.core.config import Settings
from flux_review.core.errors import DuplicateRatingError, NotFoundError, ReviewerNotAllowedError
from flux_review.core.metrics import points_added_total, ratings_rejected_total
from flux_review.crud import score_store
from flux_review.models.score import ScoreRecord
from flux_review.schemas import (
    CandidateStanding,
    PointsAdd,
    PointsRead,
    RatingRead,
    RubricResult,
    RubricSubmission,
    ScoreHistory,
)
from flux_review.services.directory import CandidateDirectory
from flux_review.services.leaderboard import merge_and_rank
from flux_review.services.reviewers import ensure_reviewer_allowed
from flux_review.services.rubric import weighted_total

logger = logging.getLogger(__name__)

router = APIRouter()

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _int_param(value: Optional[str], default: int) -> int:
    """Leading integer of a query value; missing, unparseable or zero values use ``default``."""
    match = _LEADING_INT.match(value or "")
    parsed = int(match.group(1)) if match else 0
    return parsed or default


def _to_read(record: ScoreRecord) -> PointsRead:
    return PointsRead(rollNo=record.roll_no, points=record.points)


def _submit(db: Session, settings: Settings, roll_no: str, points: float, rater: Optional[str]) -> ScoreRecord:
    try:
        ensure_reviewer_allowed(settings, rater)
        record = score_store.add_points(db, roll_no, points, rater=rater)
    except ReviewerNotAllowedError:
        ratings_rejected_total.labels(reason="unknown_reviewer").inc()
        raise
    except DuplicateRatingError:
        ratings_rejected_total.labels(reason="duplicate").inc()
        raise
    points_added_total.inc()
    logger.info(f"Added {points} points to {roll_no} (rater={rater}); total now {record.points}")
    return record


@router.get("/points/roll/{roll_no}", response_model=PointsRead)
def get_points(roll_no: str, db: Session = Depends(deps.get_db)):
    roll_no = roll_no.strip()
    record = score_store.get(db, roll_no)
    if not record:
        raise NotFoundError()
    return _to_read(record)


@router.get("/points/roll/{roll_no}/history", response_model=ScoreHistory)
def get_points_history(roll_no: str, db: Session = Depends(deps.get_db)):
    """Total plus the audit log of individual contributions."""
    roll_no = roll_no.strip()
    record = score_store.get(db, roll_no)
    if not record:
        raise NotFoundError()
    ratings = score_store.ratings_for(db, roll_no)
    return ScoreHistory(
        rollNo=record.roll_no,
        points=record.points,
        raters=[r.rater for r in ratings if r.rater],
        ratings=[RatingRead(rater=r.rater, points=r.points, createdAt=r.created_at) for r in ratings],
        createdAt=record.created_at,
        updatedAt=record.updated_at,
    )


@router.post("/points/add", response_model=PointsRead)
@router.post("/scores/add", response_model=PointsRead)
def add_points(
    payload: PointsAdd,
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
):
    record = _submit(db, settings, payload.rollNo, payload.points, payload.rater)
    return _to_read(record)


@router.post("/scores/rate", response_model=RubricResult)
def rate_candidate(
    payload: RubricSubmission,
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
):
    """Score a candidate from rubric grades instead of a raw point total."""
    awarded = weighted_total(payload, settings.RUBRIC_WEIGHTS)
    record = _submit(db, settings, payload.rollNo, awarded, payload.rater)
    return RubricResult(rollNo=record.roll_no, points=record.points, awarded=awarded)


@router.get("/points/top", response_model=List[PointsRead])
def top_points(limit: Optional[str] = Query(None), db: Session = Depends(deps.get_db)):
    return [_to_read(r) for r in score_store.list_top(db, _int_param(limit, 10))]


@router.get("/points/all", response_model=List[PointsRead])
def all_points(db: Session = Depends(deps.get_db)):
    return [_to_read(r) for r in score_store.list_all(db)]


@router.get("/points", response_model=List[PointsRead])
def page_points(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Session = Depends(deps.get_db),
):
    return [_to_read(r) for r in score_store.list_page(db, _int_param(page, 1), _int_param(limit, 100))]


@router.get("/points/all-with-details", response_model=List[CandidateStanding])
@router.get("/scores/all-with-details", response_model=List[CandidateStanding])
def all_with_details(
    rater: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    directory: CandidateDirectory = Depends(deps.get_directory),
):
    """Every directory candidate with their total, highest first.

    Passing ``rater`` hides candidates that reviewer has already scored, which
    is the queue the review screen works through.
    """
    profiles = directory.profiles()
    rater = (rater or "").strip()
    exclude = score_store.rated_by(db, rater) if rater else None
    return merge_and_rank(profiles, score_store.points_index(db), exclude=exclude)
