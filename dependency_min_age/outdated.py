"""
Collect outdated information for every installed package.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Dict, Optional

from .interfaces import DependencyLister, OutdatedInfoSource
from .models import ListOptions, OutdatedDependency
from .npm import NpmClient, registry_name


logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def get_outdated_dependencies(
    options: ListOptions,
    lister: Optional[DependencyLister] = None,
    outdated_source: Optional[OutdatedInfoSource] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> Dict[str, OutdatedDependency]:
    """Query outdated info per installed package and merge the answers.

    One `npm outdated <name>` runs per package so that a failing lookup
    (e.g. a scoped package on an unreachable registry) only loses that
    package. Failed queries are left out of the result; nothing is retried.

    Args:
        options: Scope and depth for listing installed packages
        lister: Source of installed package names (defaults to npm)
        outdated_source: Source of outdated info (defaults to npm)
        max_workers: Maximum number of concurrent queries

    Returns:
        Mapping of package name to OutdatedDependency
    """
    client = None
    if lister is None or outdated_source is None:
        client = NpmClient()
    lister = lister or client
    outdated_source = outdated_source or client

    installed = lister.list_installed(options)
    if not installed:
        logger.info("No installed dependencies found")
        return {}

    names = list(installed)
    logger.info("Checking %d installed packages for updates", len(names))

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(names)))) as executor:
        future_to_name = {
            executor.submit(outdated_source.outdated_info, name, options=options): name
            for name in names
        }
        wait(future_to_name)

    merged: Dict[str, OutdatedDependency] = {}
    for future, name in future_to_name.items():
        error = future.exception()
        if error is not None:
            logger.debug("Skipping %s, outdated query failed: %s", name, error)
            continue
        for dep_name, dependency in future.result().items():
            resolved = registry_name(dep_name, installed.get(dep_name))
            if resolved != dependency.resolved_name:
                dependency = replace(dependency, resolved_name=resolved)
            merged[dep_name] = dependency

    logger.info("%d of %d packages are outdated", len(merged), len(names))
    return merged
