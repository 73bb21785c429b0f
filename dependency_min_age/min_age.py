"""
Filter outdated dependencies by the age of their candidate versions.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .errors import MalformedResponseError
from .interfaces import TimestampSource
from .models import MinAgeFilterResult, OutdatedDependency, TimestampStatus
from .selector import select_qualified
from .semver import compare_versions, is_non_semver, release_line
from .time_utils import days, ensure_utc, parse_timestamp, utc_now
from .timestamps import NpmViewTimestampSource, fetch_version_timestamps


logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

Outcome = Tuple[Optional[OutdatedDependency], Optional[str]]


def unavailable_warning(package_name: str) -> str:
    return f'Could not retrieve time data for "{package_name}". Showing without age filter.'


class MinAgeFilter:
    """Pick age-qualified `latest` and `wanted` versions for dependencies.

    Version selection runs in two steps:

    1. The newest version that is at least `min_age` old determines the
       qualifying major.minor release line.
    2. Within that line, the newest patch that is at least `min_age_patch`
       old is recommended. Patches are considered low risk, so with the
       default of 0 days a fresh bug-fix release is surfaced right away.

    A dependency for which no version is old enough, or whose candidate is
    not newer than the installed version, is dropped. A dependency whose
    timestamps cannot be fetched is kept unchanged and reported in the
    warnings.
    """

    def __init__(
        self,
        min_age_days: float,
        min_age_patch_days: float = 0,
        source: Optional[TimestampSource] = None,
        now: Optional[datetime] = None,
        skip_non_semver: bool = True,
    ):
        """Initialize the filter.

        Args:
            min_age_days: Minimum age for the qualifying release line
            min_age_patch_days: Minimum age for patches within that line
            source: Timestamp source (defaults to `npm view`)
            now: Reference time; captured once so all packages share it
            skip_non_semver: Leave git/linked/remote installs untouched
        """
        self.min_age = days(min_age_days)
        self.min_age_patch = days(min_age_patch_days)
        self.source = source or NpmViewTimestampSource()
        self.now = ensure_utc(now) if now is not None else utc_now()
        self.skip_non_semver = skip_non_semver

    def select_version(
        self, timestamps: Dict[str, str], max_version: Optional[str] = None
    ) -> Optional[str]:
        """Run both selection steps and return the recommended version."""
        best_by_age = select_qualified(timestamps, self.min_age, self.now, max_version)
        if best_by_age is None:
            return None

        line = release_line(best_by_age)
        best_patch = select_qualified(
            timestamps, self.min_age_patch, self.now, max_version, release_line=line
        )
        return best_patch if best_patch is not None else best_by_age

    def evaluate(self, dependency: OutdatedDependency) -> Outcome:
        """Evaluate one dependency.

        Returns:
            Tuple of (dependency or None when dropped, warning or None)

        Raises:
            MalformedResponseError: The timestamp source returned a non-object
        """
        if self.skip_non_semver and dependency.current and is_non_semver(dependency.current):
            logger.debug("%s is installed from %s, not age filtered", dependency.name, dependency.current)
            return dependency, None

        lookup = fetch_version_timestamps(self.source, dependency.resolved_name)
        if lookup.status is TimestampStatus.MALFORMED:
            raise MalformedResponseError(
                f"Malformed time data for {dependency.resolved_name}: {lookup.reason}"
            )
        if lookup.status is TimestampStatus.UNAVAILABLE:
            logger.warning("No time data for %s: %s", dependency.resolved_name, lookup.reason)
            return dependency, unavailable_warning(dependency.resolved_name)

        timestamps = lookup.timestamps
        best_latest = self.select_version(timestamps)
        if best_latest is None:
            logger.debug("%s: no version is old enough", dependency.name)
            return None, None

        if dependency.current and compare_versions(best_latest, dependency.current) <= 0:
            logger.debug("%s: %s is not newer than %s", dependency.name, best_latest, dependency.current)
            return None, None

        wanted = self._evaluate_wanted(dependency, timestamps)
        logger.debug("%s: latest %s, wanted %s", dependency.name, best_latest, wanted)
        return dependency.with_versions(latest=best_latest, wanted=wanted), None

    def _evaluate_wanted(
        self, dependency: OutdatedDependency, timestamps: Dict[str, str]
    ) -> str:
        wanted = dependency.wanted
        if not wanted or wanted == dependency.current:
            return wanted

        published_at = parse_timestamp(timestamps.get(wanted, ""))
        if published_at is None or self.now - published_at >= self.min_age:
            return wanted

        best_wanted = self.select_version(timestamps, max_version=wanted)
        if best_wanted is None:
            return dependency.current
        if not dependency.current or compare_versions(best_wanted, dependency.current) > 0:
            return best_wanted
        return dependency.current

    def apply(
        self,
        dependencies: Sequence[OutdatedDependency],
        max_workers: int = DEFAULT_MAX_WORKERS,
        show_progress: bool = False,
    ) -> MinAgeFilterResult:
        """Evaluate all dependencies concurrently, keeping input order."""
        dependencies = list(dependencies)
        if not dependencies:
            return MinAgeFilterResult(dependencies=[], warnings=[])

        slots: List[Optional[OutdatedDependency]] = [None] * len(dependencies)
        warning_slots: List[Optional[str]] = [None] * len(dependencies)
        fatal: Optional[BaseException] = None

        workers = max(1, min(max_workers, len(dependencies)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self.evaluate, dependency): index
                for index, dependency in enumerate(dependencies)
            }
            completed = tqdm(
                as_completed(future_to_index),
                total=len(future_to_index),
                desc="Checking release dates",
                disable=not show_progress,
            )
            for future in completed:
                index = future_to_index[future]
                dependency = dependencies[index]
                error = future.exception()
                if isinstance(error, MalformedResponseError):
                    fatal = fatal or error
                    continue
                if error is not None:
                    logger.warning("Age check failed for %s: %s", dependency.name, error)
                    slots[index] = dependency
                    warning_slots[index] = unavailable_warning(dependency.resolved_name)
                    continue

                slots[index], warning_slots[index] = future.result()

        if fatal is not None:
            raise fatal

        return MinAgeFilterResult(
            dependencies=[dependency for dependency in slots if dependency is not None],
            warnings=[warning for warning in warning_slots if warning is not None],
        )


def apply_min_age_filter(
    dependencies: Sequence[OutdatedDependency],
    min_age_days: float,
    min_age_patch_days: float = 0,
    *,
    source: Optional[TimestampSource] = None,
    now: Optional[datetime] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    skip_non_semver: bool = True,
    show_progress: bool = False,
) -> MinAgeFilterResult:
    """Apply the minimum age filter to a list of outdated dependencies.

    See `MinAgeFilter` for the selection rules.
    """
    age_filter = MinAgeFilter(
        min_age_days,
        min_age_patch_days,
        source=source,
        now=now,
        skip_non_semver=skip_non_semver,
    )
    return age_filter.apply(dependencies, max_workers=max_workers, show_progress=show_progress)
