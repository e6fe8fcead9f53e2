"""
Container graph discovery and duplication ordering.

This module answers two questions about the graph hanging below a master
container:
    - Which sub-containers are reachable from it (`discover`)
    - In which order they must be duplicated so that every duplicate can
      reference already-made duplicates of its children (`order`)

Containers may be shared between parents, so the graph is a DAG, not a
tree. All bookkeeping is keyed by container id.

A reference cycle is a configuration fault: both steps fail fast with
GraphError(CYCLIC_REFERENCE) instead of looping.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from locrep.errors import GraphError, GraphErrorReason
from locrep.host import HostDocument
from locrep.model import Container

logger = logging.getLogger(__name__)


def _child_containers(host: HostDocument, container: Container) -> List[Container]:
    return [ref.target for ref in host.references(container) if ref.is_container]


def _cycle_error(path: List[Container], repeated: Container) -> GraphError:
    start = next(i for i, c in enumerate(path) if c.id == repeated.id)
    names = [c.name for c in path[start:]] + [repeated.name]
    return GraphError(GraphErrorReason.CYCLIC_REFERENCE, repeated.name, names)


def _walk(host: HostDocument, container: Container, collected: Dict[str, Container],
          in_progress: Set[str], path: List[Container]) -> None:
    """DFS collecting every container below `container`."""
    for child in _child_containers(host, container):
        if child.id in in_progress:
            raise _cycle_error(path, child)
        if child.id in collected:
            continue

        collected[child.id] = child
        in_progress.add(child.id)
        path.append(child)
        _walk(host, child, collected, in_progress, path)
        path.pop()
        in_progress.remove(child.id)


def discover(host: HostDocument, root: Container) -> List[Container]:
    """
    Collect every sub-container reachable from `root`.

    Args:
        host: Document owning the containers
        root: Master container (not part of the result)

    Returns:
        Unique sub-containers, in discovery order

    Raises:
        GraphError(CYCLIC_REFERENCE): If a container references one of its
            ancestors (or itself)
    """
    collected: Dict[str, Container] = {}
    _walk(host, root, collected, {root.id}, [root])
    logger.debug("Discovered %d sub-container(s) below '%s'", len(collected), root.name)
    return list(collected.values())


def find_cycle(host: HostDocument, containers: List[Container]) -> Optional[List[str]]:
    """
    Find one reference cycle among `containers`.

    Only edges between members of `containers` are followed.

    Returns:
        Container names along the cycle, first name repeated last, or None
    """
    members = {c.id for c in containers}
    visited: Set[str] = set()

    def dfs(node: Container, rec_stack: Set[str], path: List[Container]) -> Optional[List[str]]:
        visited.add(node.id)
        rec_stack.add(node.id)
        path.append(node)
        for neighbor in _child_containers(host, node):
            if neighbor.id not in members:
                continue
            if neighbor.id in rec_stack:
                return _cycle_error(path, neighbor).cycle
            if neighbor.id not in visited:
                cycle = dfs(neighbor, rec_stack, path)
                if cycle:
                    return cycle
        rec_stack.remove(node.id)
        path.pop()
        return None

    for container in containers:
        if container.id not in visited:
            cycle = dfs(container, set(), [])
            if cycle:
                return cycle
    return None


def order(host: HostDocument, containers: List[Container]) -> List[Container]:
    """
    Sort containers children-first.

    For every container C in the result, every container D that C
    references directly (with D in the input) appears strictly before C.

    Repeatedly scans the not-yet-ordered containers for one whose in-set
    children are all ordered. A full scan without progress means the input
    holds a cycle.

    Raises:
        GraphError(CYCLIC_REFERENCE): If no valid order exists
    """
    members = {c.id for c in containers}
    done: Set[str] = set()
    ordered: List[Container] = []
    pending = list(containers)

    while pending:
        remaining: List[Container] = []
        for container in pending:
            children = [c for c in _child_containers(host, container) if c.id in members]
            if all(c.id in done for c in children):
                ordered.append(container)
                done.add(container.id)
            else:
                remaining.append(container)

        if len(remaining) == len(pending):
            cycle = find_cycle(host, remaining) or []
            raise GraphError(GraphErrorReason.CYCLIC_REFERENCE, remaining[0].name, cycle)
        pending = remaining

    return ordered


__all__ = ["discover", "order", "find_cycle"]
