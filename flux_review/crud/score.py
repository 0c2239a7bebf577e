import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from flux_review.core.errors import DuplicateRatingError, StorageError
from flux_review.models.score import ScoreRating, ScoreRecord

logger = logging.getLogger(__name__)

TOP_LIMIT_MAX = 100
PAGE_LIMIT_MAX = 1000
# Two bound parameters per row keeps a chunk under SQLite's 999 variable limit
_INSERT_CHUNK = 400

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


@contextmanager
def _storage_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Score store failed to {action}: {e}")
        raise StorageError() from e


def _ranked():
    # Ties keep insertion order
    return select(ScoreRecord).order_by(ScoreRecord.points.desc(), ScoreRecord.id.asc())


def _insert_missing(db: Session, roll_nos: List[str]) -> int:
    """Insert zero-point records for ids not yet stored; never overwrites."""
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
    created = 0
    for start in range(0, len(roll_nos), _INSERT_CHUNK):
        chunk = roll_nos[start:start + _INSERT_CHUNK]
        if insert is not None:
            stmt = (
                insert(ScoreRecord)
                .values([{"roll_no": r, "points": 0} for r in chunk])
                .on_conflict_do_nothing(index_elements=["roll_no"])
            )
            created += db.execute(stmt).rowcount
        else:
            existing = set(
                db.execute(select(ScoreRecord.roll_no).where(ScoreRecord.roll_no.in_(chunk))).scalars()
            )
            missing = [r for r in chunk if r not in existing]
            db.add_all([ScoreRecord(roll_no=r, points=0) for r in missing])
            db.flush()
            created += len(missing)
    return created


def get(db: Session, roll_no: str) -> Optional[ScoreRecord]:
    with _storage_errors(db, f"read score for {roll_no}"):
        return db.execute(
            select(ScoreRecord).where(ScoreRecord.roll_no == roll_no)
        ).scalar_one_or_none()


def add_points(db: Session, roll_no: str, delta: float, rater: Optional[str] = None) -> ScoreRecord:
    """Atomically add ``delta`` to a candidate's total, creating it at 0 if absent.

    The rating row and the increment commit together. The increment is done by
    the database (``points = points + delta``), so concurrent calls for the same
    candidate never lose updates. A rater may contribute once per candidate.
    """
    with _storage_errors(db, f"add points for {roll_no}"):
        _insert_missing(db, [roll_no])
        try:
            db.add(ScoreRating(roll_no=roll_no, rater=rater, points=delta))
            db.flush()
        except IntegrityError as e:
            db.rollback()
            if rater is None:
                raise
            logger.info(f"Rejected repeat rating of {roll_no} by {rater}")
            raise DuplicateRatingError(f"{rater} has already scored {roll_no}") from e
        db.execute(
            update(ScoreRecord)
            .where(ScoreRecord.roll_no == roll_no)
            .values(points=ScoreRecord.points + delta, updated_at=func.now())
        )
        record = db.execute(
            select(ScoreRecord)
            .where(ScoreRecord.roll_no == roll_no)
            .execution_options(populate_existing=True)
        ).scalar_one()
        db.commit()
    return record


def list_all(db: Session) -> List[ScoreRecord]:
    with _storage_errors(db, "list scores"):
        return list(db.execute(_ranked()).scalars())


def list_top(db: Session, limit: int = 10) -> List[ScoreRecord]:
    limit = clamp(limit, 1, TOP_LIMIT_MAX)
    with _storage_errors(db, "list top scores"):
        return list(db.execute(_ranked().limit(limit)).scalars())


def list_page(db: Session, page: int = 1, limit: int = 100) -> List[ScoreRecord]:
    page = max(1, page)
    limit = clamp(limit, 1, PAGE_LIMIT_MAX)
    with _storage_errors(db, "list score page"):
        return list(db.execute(_ranked().offset((page - 1) * limit).limit(limit)).scalars())


def bulk_ensure(db: Session, roll_nos: Iterable[str]) -> int:
    """Create a zero-point record for every id not already stored.

    Returns the number of records actually created; existing totals are left
    untouched, so repeated calls are no-ops.
    """
    unique: List[str] = []
    seen: Set[str] = set()
    for roll_no in roll_nos:
        if not isinstance(roll_no, str) or not roll_no.strip():
            continue
        roll_no = roll_no.strip()
        if roll_no not in seen:
            seen.add(roll_no)
            unique.append(roll_no)
    if not unique:
        return 0
    with _storage_errors(db, "seed scores"):
        created = _insert_missing(db, unique)
        db.commit()
    return created


def points_index(db: Session) -> Dict[str, float]:
    with _storage_errors(db, "index scores"):
        rows = db.execute(select(ScoreRecord.roll_no, ScoreRecord.points)).all()
    return {roll_no: points for roll_no, points in rows}


def ratings_for(db: Session, roll_no: str) -> List[ScoreRating]:
    with _storage_errors(db, f"read ratings for {roll_no}"):
        return list(
            db.execute(
                select(ScoreRating).where(ScoreRating.roll_no == roll_no).order_by(ScoreRating.id.asc())
            ).scalars()
        )


def raters_for(db: Session, roll_no: str) -> List[str]:
    return [r.rater for r in ratings_for(db, roll_no) if r.rater]


def rated_by(db: Session, rater: str) -> Set[str]:
    """Candidates the given reviewer has already scored."""
    with _storage_errors(db, f"read ratings by {rater}"):
        return set(db.execute(select(ScoreRating.roll_no).where(ScoreRating.rater == rater)).scalars())
