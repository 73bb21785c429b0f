"""
Selection of the highest version that is old enough to adopt.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from .semver import compare_versions, is_version, release_line as get_release_line, version_sort_key
from .time_utils import is_old_enough


def select_qualified(
    timestamps: Dict[str, str],
    min_age: timedelta,
    now: datetime,
    max_version: Optional[str] = None,
    release_line: Optional[Tuple[int, int]] = None,
) -> Optional[str]:
    """Return the highest version published at least `min_age` before `now`.

    Args:
        timestamps: Mapping of version to ISO 8601 publish time
        min_age: Minimum time since publish
        now: Reference time for the age calculation
        max_version: If given, only versions <= this version are considered
        release_line: If given, only versions with this (major, minor) are considered

    Returns:
        The highest qualifying version, or None if nothing qualifies
    """
    valid_versions = []
    for ver, published in timestamps.items():
        if not is_version(ver):
            continue
        if release_line is not None and get_release_line(ver) != release_line:
            continue
        if not is_old_enough(published, min_age, now):
            continue
        if max_version is not None and compare_versions(ver, max_version) > 0:
            continue
        valid_versions.append(ver)

    if not valid_versions:
        return None

    valid_versions.sort(key=version_sort_key)
    return valid_versions[-1]
