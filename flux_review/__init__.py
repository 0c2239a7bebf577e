"""Flux Review backend.

Persists reviewer point submissions per candidate and serves ranked
leaderboards merged with the candidate applications export.
"""

__version__ = "0.1.0"
