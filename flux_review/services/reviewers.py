import logging
from typing import Optional

from flux_review.core.config import Settings
from flux_review.core.errors import ReviewerNotAllowedError

logger = logging.getLogger(__name__)


def ensure_reviewer_allowed(settings: Settings, rater: Optional[str]) -> None:
    """Reject raters missing from ALLOWED_REVIEWERS when that list is set.

    This is the same name-list gate the sign-in screen applies; it is not an
    authentication mechanism.
    """
    allowed = settings.allowed_reviewers
    if rater is None or not allowed:
        return
    if rater not in allowed:
        logger.warning(f"Rejected submission from unknown reviewer {rater!r}")
        raise ReviewerNotAllowedError(f"Reviewer {rater} is not on the allowed list")
