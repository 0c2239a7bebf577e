from .score import (
    CandidateStanding,
    PointsAdd,
    PointsRead,
    RatingRead,
    ReviewerList,
    RubricResult,
    RubricSubmission,
    ScoreHistory,
    SeedResult,
)
