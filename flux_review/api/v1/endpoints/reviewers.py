from fastapi import APIRouter, Depends

from flux_review.api import deps
from flux_review.core.config import Settings
from flux_review.schemas import ReviewerList

router = APIRouter()


@router.get("", response_model=ReviewerList)
def list_reviewers(settings: Settings = Depends(deps.get_settings)):
    """Names offered on the sign-in screen."""
    return ReviewerList(reviewers=settings.allowed_reviewers)
