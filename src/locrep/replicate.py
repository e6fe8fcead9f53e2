"""
Duplication & relink.

Produces one full, independent copy of a master container's tree for a
locale. Sub-containers are cloned children-first so that each duplicate can
be pointed at the already-made duplicates of its children.

OUTPUT LAYOUT:

    Localized_Versions/
      EN-US/
        Main_Comp_en_us        <- root duplicates only
      ZH-TW/
        Main_Comp_zh_tw
      _PRECOMPS/               <- every intermediate duplicate
        Sub_Comp_A_en_us
        Sub_Comp_A_zh_tw

INVARIANT:
    Once `replicate` returns, no reference inside any duplicate points at an
    original container of the replicated subtree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Set, Tuple

from locrep.errors import GraphError, GraphErrorReason
from locrep.host import HostDocument
from locrep.manifest import locale_label, locale_suffix
from locrep.model import Container, DuplicateMap, Folder

logger = logging.getLogger(__name__)


@dataclass
class OutputLayout:
    """
    Folders duplicates are placed into.

    Properties:
        output: Top-level output folder
        precomps: Hidden shared folder for non-root duplicates
    """

    output: Folder
    precomps: Folder

    @classmethod
    def create(cls, host: HostDocument, output_name: str, precomp_name: str) -> "OutputLayout":
        output = host.ensure_folder(output_name)
        return cls(output=output, precomps=host.ensure_folder(precomp_name, output))

    def locale_folder(self, host: HostDocument, locale: str) -> Folder:
        return host.ensure_folder(locale_label(locale), self.output)


def duplicate_name(original: Container, locale: str) -> str:
    return f"{original.name}_{locale_suffix(locale)}"


def _relink(host: HostDocument, duplicate: Container, dupes: DuplicateMap, pending: Set[str]) -> int:
    """Point every in-subtree child reference of `duplicate` at its duplicate."""
    relinked = 0
    for index, ref in enumerate(host.references(duplicate)):
        if not ref.is_container:
            continue
        replacement = dupes.get(ref.target)
        if replacement is not None:
            host.set_reference_target(duplicate, index, replacement)
            relinked += 1
        elif ref.target.id in pending:
            raise GraphError(GraphErrorReason.UNORDERED_SUBTREE, ref.target.name)
    return relinked


def replicate(host: HostDocument, root: Container, subtree: List[Container],
              locale: str, layout: OutputLayout) -> DuplicateMap:
    """
    Duplicate `root` and its ordered subtree for one locale.

    Args:
        host: Document owning the containers
        root: Master container; duplicated last, into the locale folder
        subtree: Sub-containers of `root`, ordered children-first
            (see `locrep.graph.order`)
        locale: Locale identifier, used for naming and the locale folder
        layout: Output folders

    Returns:
        DuplicateMap for this locale

    Raises:
        GraphError(UNORDERED_SUBTREE): If `subtree` is not ordered children-first
        HostError: If the host fails to clone, rename, move or relink
    """
    dupes = DuplicateMap(locale, root)
    locale_folder = layout.locale_folder(host, locale)
    sequence = [c for c in subtree if c.id != root.id] + [root]
    pending = {c.id for c in sequence}

    for original in sequence:
        duplicate = host.clone_container(original)
        host.rename(duplicate, duplicate_name(original, locale))
        is_root = original.id == root.id
        host.move(duplicate, locale_folder if is_root else layout.precomps)

        pending.discard(original.id)
        relinked = _relink(host, duplicate, dupes, pending)
        dupes.add(original, duplicate)
        logger.debug("  %s -> %s (%d reference(s) relinked)", original.name, duplicate.name, relinked)

    logger.info("[%s] '%s' replicated with %d sub-container(s)", locale, root.name, len(sequence) - 1)
    return dupes


def stale_references(host: HostDocument, dupes: DuplicateMap) -> List[Tuple[Container, Container]]:
    """
    References still pointing back into the original tree.

    Returns:
        (duplicate, original child it still references) pairs; empty when
        relinking is complete
    """
    stale = []
    for _, duplicate in dupes:
        for ref in host.references(duplicate):
            if ref.is_container and ref.target in dupes:
                stale.append((duplicate, ref.target))
    return stale


__all__ = ["OutputLayout", "duplicate_name", "replicate", "stale_references"]
