"""
Dependency Min-Age Tool

Checks npm dependencies for updates and recommends only versions that have
been published long enough to be considered low-risk.
"""

__version__ = "0.1.0"

from .cli import main
from .min_age import apply_min_age_filter
from .outdated import get_outdated_dependencies

__all__ = ["main", "apply_min_age_filter", "get_outdated_dependencies"]
