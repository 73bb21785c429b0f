"""
Per-version publish timestamps from the npm registry.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Dict, Optional
from urllib.parse import quote

import requests

from .interfaces import TimestampSource
from .models import TimestampLookup


logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_TIMEOUT = 30

# Bookkeeping entries npm stores next to the version timestamps.
_NON_VERSION_KEYS = ("created", "modified")


def _strip_bookkeeping(time_data: Dict[str, str]) -> Dict[str, str]:
    return {key: value for key, value in time_data.items() if key not in _NON_VERSION_KEYS}


class NpmViewTimestampSource(TimestampSource):
    """Read timestamps with `npm view <package> time --json`.

    Goes through the npm CLI so that registry settings from `.npmrc`
    (private registries, auth tokens) apply.
    """

    def __init__(self, npm: str = "npm", timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
        self.npm = npm
        self.timeout = timeout

    def get_version_timestamps(self, package_name: str) -> TimestampLookup:
        cmd = [self.npm, "view", package_name, "time", "--json"]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
            logger.debug("npm view time failed for %s: %s", package_name, e)
            return TimestampLookup.unavailable(package_name, str(e))

        if result.returncode != 0 or not result.stdout.strip():
            reason = result.stderr.strip() or f"npm exited with status {result.returncode}"
            logger.debug("npm view time returned nothing for %s: %s", package_name, reason)
            return TimestampLookup.unavailable(package_name, reason)

        try:
            time_data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            return TimestampLookup.unavailable(package_name, f"Invalid JSON from npm view: {e}")

        if not isinstance(time_data, dict):
            return TimestampLookup.malformed(
                package_name, f"npm view time returned {type(time_data).__name__}, expected an object"
            )

        return TimestampLookup.available(package_name, _strip_bookkeeping(time_data))


class RegistryTimestampSource(TimestampSource):
    """Read timestamps from the `time` field of the registry packument."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.registry_url = registry_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def package_url(self, package_name: str) -> str:
        # Scoped names keep the leading @ but escape the slash: @scope%2Fpkg
        return f"{self.registry_url}/{quote(package_name, safe='@')}"

    def get_version_timestamps(self, package_name: str) -> TimestampLookup:
        url = self.package_url(package_name)
        logger.debug("Fetching registry metadata for %s", package_name)
        try:
            with self.session.get(url, timeout=self.timeout) as response:
                response.raise_for_status()
                data = response.json()
        except requests.RequestException as e:
            logger.debug("Registry request failed for %s: %s", package_name, e)
            return TimestampLookup.unavailable(package_name, str(e))
        except ValueError as e:
            return TimestampLookup.unavailable(package_name, f"Invalid JSON from registry: {e}")

        if not isinstance(data, dict):
            return TimestampLookup.malformed(package_name, "Registry response is not an object")

        time_data = data.get("time")
        if time_data is None:
            return TimestampLookup.unavailable(package_name, "Registry response has no time data")
        if not isinstance(time_data, dict):
            return TimestampLookup.malformed(package_name, "Registry time data is not an object")

        return TimestampLookup.available(package_name, _strip_bookkeeping(time_data))


def fetch_version_timestamps(source: TimestampSource, package_name: str) -> TimestampLookup:
    """Query `source`, turning any unexpected exception into an unavailable lookup."""
    try:
        return source.get_version_timestamps(package_name)
    except Exception as e:
        logger.warning("Timestamp lookup for %s raised %s: %s", package_name, type(e).__name__, e)
        return TimestampLookup.unavailable(package_name, str(e))
