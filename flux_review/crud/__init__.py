from . import score as score_store

__all__ = ["score_store"]
