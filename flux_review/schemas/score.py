import math
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

from flux_review.models.score import RATER_MAX_LENGTH, ROLL_NO_MAX_LENGTH


def normalize_points(value: Any) -> Any:
    """Return integral totals as ints so 7 is served as ``7``, not ``7.0``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _require_roll_no(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("rollNo must be a non-empty string")
    return value


def _blank_rater_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# Capped at the column widths so oversized ids are a 400, not a database error
RollNo = Annotated[StrictStr, Field(max_length=ROLL_NO_MAX_LENGTH), AfterValidator(_require_roll_no)]
Rater = Annotated[
    Optional[Annotated[StrictStr, Field(max_length=RATER_MAX_LENGTH)]],
    AfterValidator(_blank_rater_to_none),
]
Points = Annotated[Union[int, float], BeforeValidator(normalize_points)]
Grade = Annotated[int, Field(ge=1, le=10, strict=True)]


class PointsAdd(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rollNo: RollNo
    points: Union[StrictInt, StrictFloat]
    rater: Rater = None

    @field_validator("points")
    @classmethod
    def _finite_points(cls, v: Union[int, float]) -> Union[int, float]:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("points must be a finite number")
        return v


class RubricSubmission(BaseModel):
    """Grades from the scoring sidebar; each criterion is scored 1-10."""

    model_config = ConfigDict(extra="ignore")

    rollNo: RollNo
    rater: Rater = None
    technicalSkills: Grade
    communication: Grade
    leadershipPotential: Grade
    overallRating: Grade


class PointsRead(BaseModel):
    rollNo: str
    points: Points


class RubricResult(PointsRead):
    awarded: Points


class RatingRead(BaseModel):
    rater: Optional[str] = None
    points: Points
    createdAt: Optional[datetime] = None


class ScoreHistory(PointsRead):
    raters: List[str]
    ratings: List[RatingRead]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CandidateStanding(BaseModel):
    rollNo: Optional[str] = None
    points: Points = 0
    name: Optional[str] = None
    branch: Optional[str] = None
    imageUrl: Optional[str] = None
    application: Dict[str, Any]


class SeedResult(BaseModel):
    created: int


class ReviewerList(BaseModel):
    reviewers: List[str]
