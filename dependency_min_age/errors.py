"""
Exceptions raised by the npm adapters and the filter engine.
"""

from __future__ import annotations

from typing import Optional


class DependencyMinAgeError(Exception):
    """Base class for all errors raised by this package."""


class NpmCommandError(DependencyMinAgeError):
    """Raised when an npm command fails without producing usable output.

    Attributes:
        command: The argument vector that was executed
        returncode: Exit status of the npm process, if it ran
        stderr: Captured standard error, or npm's own error summary
    """

    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class MalformedResponseError(DependencyMinAgeError):
    """Raised when a response that must be a JSON object is something else."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source
