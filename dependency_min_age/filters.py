"""
User-selected exclusions and ordering of outdated dependencies.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import FilterOptions, OutdatedDependency
from .semver import NON_SEMVER_MARKERS, is_prerelease


def parse_ignore_packages(value: str) -> Tuple[str, ...]:
    """Split a comma-separated `--ignore-packages` value."""
    names = tuple(name.strip() for name in (value or "").split(",") if name.strip())
    if not names or names[0].startswith("-"):
        raise ValueError("Invalid value of --ignore-packages")
    return names


def filter_dependencies(
    dependencies: Iterable[OutdatedDependency], options: FilterOptions
) -> List[OutdatedDependency]:
    """Drop dependencies the user asked to ignore.

    Entries whose `latest` is a git/linked/remote marker are always
    dropped, since there is no registry version to recommend.
    """
    filtered = [dep for dep in dependencies if dep.latest not in NON_SEMVER_MARKERS]

    if options.ignore_packages:
        ignored = set(options.ignore_packages)
        filtered = [dep for dep in filtered if dep.name not in ignored]

    if options.ignore_dev_dependencies:
        filtered = [dep for dep in filtered if dep.type != "devDependencies"]

    if options.ignore_pre_releases:
        filtered = [
            dep for dep in filtered
            if not is_prerelease(dep.current) and not is_prerelease(dep.latest)
        ]

    return filtered


def sort_dependencies(
    dependencies: Iterable[OutdatedDependency], by: str = "name"
) -> List[OutdatedDependency]:
    """Sort by name, or by type (dependencies first) and then name."""
    if by == "name":
        return sorted(dependencies, key=lambda dep: dep.name)
    if by == "type":
        return sorted(
            dependencies,
            key=lambda dep: (0 if dep.type == "dependencies" else 1, dep.name),
        )
    raise ValueError(f"Unsupported sort order: {by}")
