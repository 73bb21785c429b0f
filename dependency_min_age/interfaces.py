"""
Interfaces for the package-manager and registry collaborators.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

from .models import ListOptions, OutdatedDependency, TimestampLookup


class DependencyLister(Protocol):
    """List the packages installed in a project (or globally)."""

    def list_installed(self, options: ListOptions) -> Dict[str, Dict]:
        ...


class OutdatedInfoSource(Protocol):
    """Report current/wanted/latest versions for named packages."""

    def outdated_info(
        self, *names: str, options: Optional[ListOptions] = None
    ) -> Dict[str, OutdatedDependency]:
        ...


class TimestampSource(Protocol):
    """Provide the publish time of every version of a package."""

    def get_version_timestamps(self, package_name: str) -> TimestampLookup:
        ...
