"""
Command-line interface for the dependency min-age tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import DependencyMinAgeError
from .filters import filter_dependencies, parse_ignore_packages, sort_dependencies
from .min_age import DEFAULT_MAX_WORKERS, apply_min_age_filter
from .models import FilterOptions, ListOptions
from .outdated import get_outdated_dependencies
from .reporting import export_csv, format_table, log_warnings, save_results_json, summarize
from .timestamps import DEFAULT_REGISTRY_URL, NpmViewTimestampSource, RegistryTimestampSource


logger = logging.getLogger(__name__)


def _non_negative_days(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number of days: {value}")
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"Number of days must not be negative: {value}")
    return parsed


def _ignore_packages(value: str):
    try:
        return parse_ignore_packages(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dependency-min-age",
        description="Show outdated npm dependencies, recommending only versions that have been published long enough"
    )

    parser.add_argument(
        "--min-age",
        type=_non_negative_days,
        default=None,
        metavar="DAYS",
        help="Only recommend versions whose release line has a version at least DAYS old"
    )

    parser.add_argument(
        "--min-age-patch",
        type=_non_negative_days,
        default=0,
        metavar="DAYS",
        help="Minimum age of patches within the qualifying release line. Default: 0"
    )

    parser.add_argument(
        "--ignore-pre-releases",
        action="store_true",
        help="Don't recommend versions containing a hyphen (e.g. 2.1.0-alpha, 2.1.0-rc.1)"
    )

    parser.add_argument(
        "--ignore-dev-dependencies",
        action="store_true",
        help="Do not warn if devDependencies are outdated"
    )

    parser.add_argument(
        "--ignore-packages",
        type=_ignore_packages,
        default=(),
        metavar="NAMES",
        help="Comma-separated list of packages to ignore, even if they are outdated"
    )

    parser.add_argument(
        "--global",
        dest="global_scope",
        action="store_true",
        help="Check packages in the global install prefix instead of the current project"
    )

    parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Max depth for checking the dependency tree"
    )

    parser.add_argument(
        "--timestamp-source",
        choices=["npm", "registry"],
        default="npm",
        help="Read release dates via `npm view` or directly from the registry. Default: npm"
    )

    parser.add_argument(
        "--registry",
        default=DEFAULT_REGISTRY_URL,
        help=f"Registry URL for --timestamp-source registry. Default: {DEFAULT_REGISTRY_URL}"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help=f"Number of concurrent npm/registry queries. Default: {DEFAULT_MAX_WORKERS}"
    )

    parser.add_argument(
        "--output-dir",
        default="./output",
        help="Output directory for --json and --csv. Default: ./output"
    )

    parser.add_argument("--json", action="store_true", help="Save results as JSON")
    parser.add_argument("--csv", action="store_true", help="Save results as CSV")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar while checking release dates")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI. Returns 0 if nothing is outdated, else 1."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.min_age is None and args.min_age_patch:
        parser.error("--min-age-patch requires --min-age")
    if args.workers < 1:
        parser.error("--workers must be at least 1")

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    list_options = ListOptions(global_scope=args.global_scope, depth=args.depth)
    filter_options = FilterOptions(
        ignore_packages=tuple(args.ignore_packages),
        ignore_dev_dependencies=args.ignore_dev_dependencies,
        ignore_pre_releases=args.ignore_pre_releases,
    )

    warnings: List[str] = []
    try:
        outdated = get_outdated_dependencies(list_options, max_workers=args.workers)
        dependencies = filter_dependencies(outdated.values(), filter_options)

        if args.min_age is not None and dependencies:
            if args.timestamp_source == "registry":
                source = RegistryTimestampSource(args.registry)
            else:
                source = NpmViewTimestampSource()
            result = apply_min_age_filter(
                dependencies,
                args.min_age,
                args.min_age_patch,
                source=source,
                max_workers=args.workers,
                show_progress=args.progress,
            )
            # Replacing `latest` may turn it into a pre-release.
            dependencies = filter_dependencies(result.dependencies, filter_options)
            warnings = result.warnings
    except DependencyMinAgeError as e:
        logger.error("Error while gathering outdated dependencies: %s", e)
        stderr = getattr(e, "stderr", "")
        if stderr:
            logger.error("%s", stderr)
        return 1

    log_warnings(warnings)
    dependencies = sort_dependencies(dependencies, by="name")

    print(summarize(dependencies))
    if dependencies:
        print()
        print(format_table(dependencies))
        print()

    output_dir = Path(args.output_dir)
    if args.json:
        results_file = save_results_json(dependencies, warnings, output_dir)
        print(f"Results saved to: {results_file}")
    if args.csv:
        csv_file = export_csv(dependencies, output_dir)
        print(f"CSV saved to: {csv_file}")

    return 1 if dependencies else 0


if __name__ == "__main__":
    sys.exit(main())
