"""
Reporting and export utilities.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Iterable, List, Sequence

import pandas as pd

from .models import OutdatedDependency
from .semver import update_type


logger = logging.getLogger(__name__)

COLUMNS = ["Package", "Current", "Wanted", "Latest", "Type", "Location", "Package Type"]


def summarize(dependencies: Sequence[OutdatedDependency]) -> str:
    if not dependencies:
        return "All dependencies are up-to-date."
    if len(dependencies) == 1:
        return "1 outdated dependency found:"
    return f"{len(dependencies)} outdated dependencies found:"


def _row(dependency: OutdatedDependency) -> List[str]:
    return [
        dependency.name,
        dependency.current,
        dependency.wanted,
        dependency.latest,
        update_type(dependency.current, dependency.latest) or "",
        dependency.location,
        dependency.type,
    ]


def format_table(dependencies: Iterable[OutdatedDependency]) -> str:
    """Render dependencies as a plain table with aligned columns.

    Version columns are right-aligned, all others left-aligned.
    """
    rows = [COLUMNS] + [_row(dep) for dep in dependencies]
    widths = [max(len(row[col]) for row in rows) for col in range(len(COLUMNS))]
    right_aligned = {1, 2, 3}

    lines = []
    for row in rows:
        cells = [
            cell.rjust(widths[col]) if col in right_aligned else cell.ljust(widths[col])
            for col, cell in enumerate(row)
        ]
        lines.append("  ".join(cells).rstrip())
    return "\n".join(lines)


def log_warnings(warnings: Iterable[str]) -> None:
    for warning in warnings:
        logger.warning(warning)


def dependencies_frame(dependencies: Iterable[OutdatedDependency]) -> pd.DataFrame:
    records = []
    for dependency in dependencies:
        record = asdict(dependency)
        record["update_type"] = update_type(dependency.current, dependency.latest)
        records.append(record)
    columns = [
        "name",
        "resolved_name",
        "current",
        "wanted",
        "latest",
        "update_type",
        "type",
        "location",
        "homepage",
    ]
    return pd.DataFrame(records, columns=columns)


def save_results_json(
    dependencies: Sequence[OutdatedDependency],
    warnings: Sequence[str],
    output_dir: Path,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / "outdated_results.json"
    results = {
        "num_outdated": len(dependencies),
        "dependencies": [asdict(dep) for dep in dependencies],
        "warnings": list(warnings),
    }
    with open(results_file, "w") as f:
        json.dump(results, f, indent=2, default=str)
    return results_file


def export_csv(dependencies: Sequence[OutdatedDependency], output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_file = output_dir / "outdated_dependencies.csv"
    dependencies_frame(dependencies).to_csv(csv_file, index=False)
    return csv_file
