"""Dependency ordering of discovered packages.

Kahn's algorithm over the "depends on" graph. Among the packages whose
dependencies are all placed, the lexicographically smallest external name is
emitted next, so identical input always yields the identical order.
Dependencies on names that were not discovered are dropped before the graph
is built.
"""
from __future__ import annotations

import heapq
import logging
from typing import Dict, Iterable, List, NamedTuple

from packstate.core.exceptions import CycleDetectedError

from .model import PackageRecord

logger = logging.getLogger(__name__)


class DependencyGraph(NamedTuple):
    # name -> discovered names it depends on
    requires: Dict[str, List[str]]
    # name -> discovered names that depend on it
    dependents: Dict[str, List[str]]
    # "<name>:<dependency>" for every dependency that was not discovered
    unknown: List[str]


def build_graph(records: Iterable[PackageRecord]) -> DependencyGraph:
    by_name = {r.external_name: r for r in records}
    requires: Dict[str, List[str]] = {name: [] for name in by_name}
    dependents: Dict[str, List[str]] = {name: [] for name in by_name}
    unknown: List[str] = []

    for name, record in by_name.items():
        for dep in record.dependencies:
            if dep == name:
                continue
            if dep not in by_name:
                unknown.append(f"{name}:{dep}")
                continue
            if dep in requires[name]:
                continue
            requires[name].append(dep)
            dependents[dep].append(name)
    return DependencyGraph(requires, dependents, unknown)


def order_packages(records: Iterable[PackageRecord]) -> List[str]:
    """Return external names so every package follows its dependencies.

    Raises:
        CycleDetectedError: If some packages depend on each other in a cycle;
            the error names every package that could not be placed.
    """
    graph = build_graph(records)
    if graph.unknown:
        logger.debug("Ignoring dependencies on packages that are not present: %s", ", ".join(graph.unknown))

    indegree = {name: len(deps) for name, deps in graph.requires.items()}
    ready = [name for name, count in indegree.items() if count == 0]
    heapq.heapify(ready)

    order: List[str] = []
    while ready:
        name = heapq.heappop(ready)
        order.append(name)
        for dependent in graph.dependents[name]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(order) != len(indegree):
        remaining = [name for name, count in indegree.items() if count > 0]
        raise CycleDetectedError(remaining)
    return order


def sort_records(records: Iterable[PackageRecord]) -> List[PackageRecord]:
    """Return ``records`` in load order."""
    by_name = {r.external_name: r for r in records}
    return [by_name[name] for name in order_packages(by_name.values())]


__all__ = ["DependencyGraph", "build_graph", "order_packages", "sort_records"]
