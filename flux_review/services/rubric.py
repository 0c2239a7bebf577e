from typing import Mapping

from flux_review.core.config import RUBRIC_CRITERIA
from flux_review.schemas.score import RubricSubmission


def weighted_total(submission: RubricSubmission, weights: Mapping[str, float]) -> float:
    """Blend the rubric grades into the point total sent to the score store.

    With the default weights of 1.0 this is the plain sum of the four grades,
    which is what the scoring sidebar submits.
    """
    return sum(getattr(submission, name) * weights.get(name, 1.0) for name in RUBRIC_CRITERIA)
