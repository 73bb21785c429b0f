import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from dependency_min_age.models import TimestampLookup


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def ago(days: float) -> str:
    """npm-style timestamp `days` before NOW."""
    stamp = NOW - timedelta(days=days)
    return stamp.strftime("%Y-%m-%dT%H:%M:%S.000Z")


class FakeSource:
    """In-memory timestamp source that records which packages were queried."""

    def __init__(self, data=None, malformed=(), delays=None):
        self.data = data or {}
        self.malformed = set(malformed)
        self.delays = delays or {}
        self.calls = []
        self._lock = threading.Lock()

    def get_version_timestamps(self, package_name):
        with self._lock:
            self.calls.append(package_name)
        if package_name in self.delays:
            time.sleep(self.delays[package_name])
        if package_name in self.malformed:
            return TimestampLookup.malformed(package_name, "not an object")
        if package_name not in self.data:
            return TimestampLookup.unavailable(package_name, "E404")
        return TimestampLookup.available(package_name, dict(self.data[package_name]))


@pytest.fixture
def now():
    return NOW
