"""
Thin wrappers around the `npm list` and `npm outdated` commands.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from .errors import MalformedResponseError, NpmCommandError
from .interfaces import DependencyLister, OutdatedInfoSource
from .models import ListOptions, OutdatedDependency


logger = logging.getLogger(__name__)

# https://registry.npmjs.org/@scope/name/-/name-1.0.0.tgz -> @scope/name
_TARBALL_NAME_RE = re.compile(r"^https?://[^/]+/((?:@[^/]+/)?[^/@]+)/-/")


def parse_response(stdout: str, command: Optional[List[str]] = None) -> Dict:
    """Parse npm's JSON output into a dictionary.

    Empty output means "nothing to report" and yields an empty dict.

    Raises:
        MalformedResponseError: The output is not a JSON object
        NpmCommandError: npm reported an `error` object
    """
    try:
        response = json.loads(stdout or "{}")
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"npm did not respond with valid JSON: {e}", source=stdout) from e

    if not isinstance(response, dict):
        raise MalformedResponseError("npm did not respond with an object.", source=stdout)

    if "error" in response:
        error = response["error"]
        if isinstance(error, dict):
            summary = error.get("summary") or error.get("code") or "Unknown npm error"
            detail = error.get("detail", "")
        else:
            summary, detail = str(error), ""
        raise NpmCommandError(summary, command=command, stderr=detail)

    return response


def registry_name(name: str, entry: Optional[Dict]) -> str:
    """Name under which `name` is published, following npm aliases."""
    resolved = (entry or {}).get("resolved")
    if isinstance(resolved, str):
        match = _TARBALL_NAME_RE.match(resolved)
        if match:
            return match.group(1)
    return name


def prepare_outdated(
    dependencies: Dict[str, Dict], resolved_names: Optional[Dict[str, str]] = None
) -> Dict[str, OutdatedDependency]:
    """Build OutdatedDependency records from a raw `npm outdated` object."""
    resolved_names = resolved_names or {}
    outdated: Dict[str, OutdatedDependency] = {}
    for name, entry in dependencies.items():
        if not isinstance(entry, dict):
            raise MalformedResponseError(f"Outdated entry for {name} is not an object.")
        outdated[name] = OutdatedDependency(
            name=name,
            current=entry.get("current") or "",
            wanted=entry.get("wanted") or "",
            latest=entry.get("latest") or "",
            location=(entry.get("location") or "").replace("\\", "/"),
            type=entry.get("type") or "",
            resolved_name=resolved_names.get(name, name),
            homepage=entry.get("homepage"),
        )
    return outdated


class NpmClient(DependencyLister, OutdatedInfoSource):
    """Run npm commands in a project directory."""

    def __init__(
        self,
        npm: str = "npm",
        timeout: Optional[float] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self.npm = npm
        self.timeout = timeout
        self.cwd = cwd

    def list_installed(self, options: ListOptions) -> Dict[str, Dict]:
        """Return the `dependencies` object of `npm list --json`."""
        cmd = [self.npm, "list", "--json", "--depth", str(options.depth or 0)]
        if options.global_scope:
            cmd.append("--global")

        response = parse_response(self._run(cmd), cmd)
        dependencies = response.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            raise MalformedResponseError("npm list dependencies is not an object.")
        logger.debug("npm list reported %d installed packages", len(dependencies))
        return dependencies

    def outdated_info(
        self, *names: str, options: Optional[ListOptions] = None
    ) -> Dict[str, OutdatedDependency]:
        """Return outdated information for `names` (all packages when empty)."""
        cmd = [self.npm, "outdated", "--json", "--long"]
        if options is not None and options.global_scope:
            cmd.append("--global")
        cmd.extend(names)

        return prepare_outdated(parse_response(self._run(cmd), cmd))

    def _run(self, cmd: List[str]) -> str:
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self.cwd,
            )
        except FileNotFoundError as e:
            raise NpmCommandError(f"npm executable not found: {self.npm}", command=cmd) from e
        except subprocess.TimeoutExpired as e:
            raise NpmCommandError(f"npm timed out after {self.timeout}s", command=cmd) from e

        # npm exits non-zero whenever something is outdated; only treat it as
        # a failure when there is no output to parse.
        if result.returncode != 0 and not result.stdout.strip():
            raise NpmCommandError(
                f"{' '.join(cmd)} failed with exit status {result.returncode}",
                command=cmd,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result.stdout
