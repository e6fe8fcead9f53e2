"""
Deep name resolution.

Finds a leaf by name anywhere below a root container.

SEARCH ORDER (first match wins):
    1. Shallow pass: the root's direct references, in reference order,
       matching leaves only
    2. Deep pass: each child container in reference order, searched with
       the same two-phase rule

So a leaf directly inside the root always beats a same-named leaf nested
deeper, and between two sibling sub-containers the one referenced first
wins. Duplicate names are never reported as ambiguous.
"""

from __future__ import annotations

from typing import List, Optional, Set, Union

from locrep.host import HostDocument
from locrep.model import Container, Resolution, ResolutionMiss


def _search(host: HostDocument, container: Container, name: str,
            in_progress: Set[str], exhausted: Set[str]) -> Optional[Resolution]:
    references = host.references(container)

    for ref in references:
        if not ref.is_container and ref.target.name == name:
            return Resolution(leaf=ref.target, owner=container)

    in_progress.add(container.id)
    for ref in references:
        child = ref.target
        if not ref.is_container or child.id in in_progress or child.id in exhausted:
            continue
        found = _search(host, child, name, in_progress, exhausted)
        if found:
            return found
    in_progress.discard(container.id)
    exhausted.add(container.id)
    return None


def find_by_name(host: HostDocument, root: Container, name: str) -> Union[Resolution, ResolutionMiss]:
    """
    Find the first leaf called `name` below `root`.

    Shared sub-containers are searched once; a container already on the
    current search path is not re-entered.

    Returns:
        Resolution(leaf, owner), or ResolutionMiss when nothing matches
    """
    found = _search(host, root, name, set(), set())
    if found is None:
        return ResolutionMiss(root_name=root.name, leaf_name=name)
    return found


def find_all_by_name(host: HostDocument, root: Container, name: str) -> List[Resolution]:
    """
    Every leaf called `name` below `root`, in the order `find_by_name` ranks them.

    Used by preflight checks to surface names that collide across sibling
    sub-containers.
    """
    matches: List[Resolution] = []
    seen: Set[str] = set()

    def visit(container: Container, path: Set[str]) -> None:
        references = host.references(container)
        for ref in references:
            if not ref.is_container and ref.target.name == name:
                matches.append(Resolution(leaf=ref.target, owner=container))
        path.add(container.id)
        for ref in references:
            if ref.is_container and ref.target.id not in path and ref.target.id not in seen:
                visit(ref.target, path)
        path.discard(container.id)
        seen.add(container.id)

    visit(root, set())
    return matches


__all__ = ["find_by_name", "find_all_by_name"]
