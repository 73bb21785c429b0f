"""Tests for the dependency_min_age package."""

from datetime import datetime, timedelta, timezone

import pytest


def test_package_import():
    """Test that the package can be imported."""
    import dependency_min_age
    assert dependency_min_age.__version__ == "0.1.0"


def test_cli_import():
    """Test that CLI module can be imported."""
    from dependency_min_age.cli import main
    assert callable(main)


def test_outdated_dependency_defaults():
    """Resolved name and location fall back to the package name."""
    from dependency_min_age.models import OutdatedDependency

    dependency = OutdatedDependency(name="@scope/pkg", current="1.0.0")

    assert dependency.resolved_name == "@scope/pkg"
    assert dependency.location == "node_modules/@scope/pkg"


def test_with_versions_returns_copy():
    from dependency_min_age.models import OutdatedDependency

    dependency = OutdatedDependency(name="demo", current="1.0.0", wanted="1.0.0", latest="2.0.0")
    updated = dependency.with_versions(latest="1.5.0")

    assert updated.latest == "1.5.0"
    assert updated.wanted == "1.0.0"
    assert dependency.latest == "2.0.0"


def test_parse_timestamp_normalizes_to_utc():
    from dependency_min_age.time_utils import parse_timestamp

    parsed = parse_timestamp("2011-03-21T21:49:35.151Z")

    assert parsed == datetime(2011, 3, 21, 21, 49, 35, 151000, tzinfo=timezone.utc)
    assert parse_timestamp("") is None
    assert parse_timestamp("yesterday") is None


def test_is_old_enough_boundary():
    from dependency_min_age.time_utils import is_old_enough

    now = datetime(2024, 1, 31, tzinfo=timezone.utc)

    assert is_old_enough("2024-01-01T00:00:00Z", timedelta(days=30), now)
    assert not is_old_enough("2024-01-01T00:00:01Z", timedelta(days=30), now)
    assert not is_old_enough("garbage", timedelta(days=0), now)


def test_days_rejects_negative_values():
    from dependency_min_age.time_utils import days

    assert days(1.5) == timedelta(days=1, hours=12)
    with pytest.raises(ValueError):
        days(-1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
