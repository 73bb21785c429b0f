"""
Core data models for min-age filtering of outdated dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class OutdatedDependency:
    """One outdated package as reported by `npm outdated`."""

    name: str
    current: str = ""
    wanted: str = ""
    latest: str = ""
    location: str = ""
    type: str = ""
    resolved_name: str = ""
    homepage: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.resolved_name:
            object.__setattr__(self, "resolved_name", self.name)
        if not self.location:
            object.__setattr__(self, "location", f"node_modules/{self.name}")

    def with_versions(
        self, latest: Optional[str] = None, wanted: Optional[str] = None
    ) -> "OutdatedDependency":
        """Return a copy with `latest` and/or `wanted` overridden."""
        changes = {}
        if latest is not None:
            changes["latest"] = latest
        if wanted is not None:
            changes["wanted"] = wanted
        return replace(self, **changes)


class TimestampStatus(Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class TimestampLookup:
    """Outcome of fetching the publish timestamps of one package."""

    package: str
    status: TimestampStatus
    timestamps: Dict[str, str] = field(default_factory=dict)
    reason: str = ""

    @classmethod
    def available(cls, package: str, timestamps: Dict[str, str]) -> "TimestampLookup":
        return cls(package=package, status=TimestampStatus.AVAILABLE, timestamps=timestamps)

    @classmethod
    def unavailable(cls, package: str, reason: str = "") -> "TimestampLookup":
        return cls(package=package, status=TimestampStatus.UNAVAILABLE, reason=reason)

    @classmethod
    def malformed(cls, package: str, reason: str = "") -> "TimestampLookup":
        return cls(package=package, status=TimestampStatus.MALFORMED, reason=reason)


@dataclass(frozen=True)
class MinAgeFilterResult:
    """Dependencies left after the min-age filter, plus fallback warnings."""

    dependencies: List[OutdatedDependency]
    warnings: List[str]


@dataclass(frozen=True)
class ListOptions:
    """Options forwarded to `npm list` and `npm outdated`."""

    global_scope: bool = False
    depth: Optional[int] = None


@dataclass(frozen=True)
class FilterOptions:
    """User-selected exclusions applied before display."""

    ignore_packages: Tuple[str, ...] = ()
    ignore_dev_dependencies: bool = False
    ignore_pre_releases: bool = False
