from .score import ScoreRecord, ScoreRating

__all__ = ["ScoreRecord", "ScoreRating"]
