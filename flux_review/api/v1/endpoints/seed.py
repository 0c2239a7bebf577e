import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from flux_review.api import deps
from flux_review.core.metrics import candidates_seeded_total
from flux_review.crud import score_store
from flux_review.schemas import SeedResult
from flux_review.services.directory import CandidateDirectory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/from-applications", response_model=SeedResult)
def seed_from_applications(
    db: Session = Depends(deps.get_db),
    directory: CandidateDirectory = Depends(deps.get_directory),
):
    """Create zero-point records for every candidate in the directory.

    Existing records are left untouched, so only new candidates are counted.
    """
    roll_nos = directory.roll_nos()
    created = score_store.bulk_ensure(db, roll_nos)
    candidates_seeded_total.inc(created)
    logger.info(f"Seeded {created} new score records from {len(roll_nos)} applications")
    return SeedResult(created=created)
