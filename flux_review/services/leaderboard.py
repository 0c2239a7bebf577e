from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from .directory import profile_roll_no


def _display(profile: Mapping[str, Any], key: str) -> Optional[str]:
    value = profile.get(key)
    return str(value) if value else None


def merge_and_rank(
    profiles: Iterable[Mapping[str, Any]],
    points_by_roll: Mapping[str, float],
    exclude: Optional[Set[str]] = None,
) -> List[Dict[str, Any]]:
    """Join directory profiles with stored totals, highest points first.

    Candidates with no stored record count as 0 points. ``exclude`` drops the
    given roll numbers (used to hide candidates a reviewer already scored).
    The sort is stable, so equal totals keep directory order.
    """
    exclude = exclude or set()
    merged = []
    for profile in profiles:
        roll_no = profile_roll_no(profile)
        if roll_no is not None and roll_no in exclude:
            continue
        merged.append(
            {
                "rollNo": roll_no,
                "points": points_by_roll.get(roll_no, 0) if roll_no else 0,
                "name": _display(profile, "name"),
                "branch": _display(profile, "branch"),
                "imageUrl": _display(profile, "imageUrl"),
                "application": dict(profile),
            }
        )
    merged.sort(key=lambda item: item["points"], reverse=True)
    return merged
