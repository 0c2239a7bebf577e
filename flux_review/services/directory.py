"""Read-only access to the candidate directory (the applications export)."""

import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional, Tuple

from flux_review.core.errors import DirectoryError

logger = logging.getLogger(__name__)


def profile_roll_no(profile: Dict[str, Any]) -> Optional[str]:
    """The profile's roll number as a trimmed string, or None when blank."""
    value = profile.get("rollNo")
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    return value or None


class CandidateDirectory:
    """Loads candidate profiles from a JSON file holding a list of objects.

    The parsed list is cached and re-read whenever the file's mtime changes,
    so a refreshed export is picked up without restarting the service.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._cache: Optional[Tuple[Tuple[int, int], List[Dict[str, Any]]]] = None

    def profiles(self) -> List[Dict[str, Any]]:
        try:
            stat = os.stat(self.path)
        except OSError as e:
            logger.error(f"Candidate directory not readable at {self.path}: {e}")
            raise DirectoryError("Candidate directory unavailable") from e

        with self._lock:
            version = (stat.st_mtime_ns, stat.st_size)
            if self._cache and self._cache[0] == version:
                return self._cache[1]
            profiles = self._read()
            self._cache = (version, profiles)
            logger.info(f"Loaded {len(profiles)} candidate profiles from {self.path}")
            return profiles

    def roll_nos(self) -> List[str]:
        return [r for r in (profile_roll_no(p) for p in self.profiles()) if r]

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to parse candidate directory {self.path}: {e}")
            raise DirectoryError("Candidate directory unavailable") from e
        if not isinstance(data, list):
            logger.error(f"Candidate directory {self.path} is not a JSON list")
            raise DirectoryError("Candidate directory unavailable")
        skipped = sum(1 for item in data if not isinstance(item, dict))
        if skipped:
            logger.warning(f"Skipping {skipped} non-object entries in {self.path}")
        return [item for item in data if isinstance(item, dict)]
