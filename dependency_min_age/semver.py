"""
Semantic version helpers for npm version strings.

Only the leading `major.minor.patch` triplet is interpreted. Anything after
it is opaque, except that a hyphen directly after the triplet marks a
pre-release, which sorts below the release with the same triplet. Strings
without a triplet (``git``, ``linked``, dist-tags, ...) compare equal to
everything.
"""

from __future__ import annotations

import functools
import re
from typing import Optional, Tuple


NON_SEMVER_MARKERS = ("git", "linked", "remote")

_TRIPLET_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)")
_SEPARATOR_RE = re.compile(r"([-+])(?=.)")


def parse_triplet(version: str) -> Optional[Tuple[int, int, int]]:
    match = _TRIPLET_RE.match(version or "")
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def _suffix(version: str) -> str:
    match = _TRIPLET_RE.match(version)
    return version[match.end():] if match else ""


def compare_versions(a: str, b: str) -> int:
    """Compare two versions numerically by major.minor.patch.

    Returns a negative number if `a` sorts before `b`, a positive number if
    after, and 0 if they are equal or either one cannot be parsed.
    """
    triplet_a = parse_triplet(a)
    triplet_b = parse_triplet(b)
    if triplet_a is None or triplet_b is None:
        return 0

    for part_a, part_b in zip(triplet_a, triplet_b):
        if part_a != part_b:
            return part_a - part_b

    a_is_prerelease = _suffix(a).startswith("-")
    b_is_prerelease = _suffix(b).startswith("-")
    if a_is_prerelease and not b_is_prerelease:
        return -1
    if b_is_prerelease and not a_is_prerelease:
        return 1
    return 0


version_sort_key = functools.cmp_to_key(compare_versions)


def is_version(key: str) -> bool:
    """True if `key` looks like a version rather than a dist-tag or marker."""
    return parse_triplet(key) is not None


def release_line(version: str) -> Optional[Tuple[int, int]]:
    """Return the (major, minor) pair of `version`, or None."""
    triplet = parse_triplet(version)
    if triplet is None:
        return None
    return triplet[0], triplet[1]


def is_prerelease(version: str) -> bool:
    return "-" in (version or "")


def is_non_semver(version: str) -> bool:
    """True for markers npm uses instead of versions (git, linked, ...)."""
    if not version:
        return True
    if version in NON_SEMVER_MARKERS:
        return True
    return not is_version(version)


def update_type(current: str, latest: str) -> Optional[str]:
    """Classify the step from `current` to `latest`.

    Returns one of ``major``, ``minor``, ``patch``, ``prerelease`` or
    ``build``; None for identical versions, downgrades and unparseable input.
    """
    if current == latest:
        return None

    current_triplet = parse_triplet(current)
    latest_triplet = parse_triplet(latest)
    if current_triplet is None or latest_triplet is None:
        return None

    for kind, old, new in zip(("major", "minor", "patch"), current_triplet, latest_triplet):
        if old < new:
            return kind
        if old > new:
            return None

    separator = _SEPARATOR_RE.search(_suffix(latest))
    if separator is None:
        return None
    return "prerelease" if separator.group(1) == "-" else "build"
