"""
Substitution application.

Walks each locale's duplicated trees and writes the manifest values into
their leaves. Nothing in here is fatal: every miss or failure is counted
in the Report and processing continues with the next row.

A row processed for one locale never touches another locale's duplicates,
since each lookup goes through that locale's DuplicateMap.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Mapping, Optional

from locrep.errors import HostError, SubstitutionError, SubstitutionErrorReason
from locrep.host import HostDocument
from locrep.model import DuplicateMap, Leaf, LeafKind, ManifestRow, NodeKind, Report, ReportBuilder, ResolutionMiss
from locrep.resolve import find_by_name

logger = logging.getLogger(__name__)


def _preview(value: str, width: int = 50) -> str:
    return value if len(value) <= width else value[:width] + "..."


class Substituter:
    """
    Applies manifest rows to duplicated trees and accumulates a Report.

    Args:
        host: Document owning the duplicates
        report: Accumulator shared across locales
        asset_root: Base directory for relative asset paths
        excluded_roots: root name -> reason, for roots that were not replicated
    """

    def __init__(self, host: HostDocument, report: ReportBuilder,
                 asset_root: Optional[str] = None,
                 excluded_roots: Optional[Mapping[str, str]] = None):
        self.host = host
        self.report = report
        self.asset_root = asset_root
        self.excluded_roots: Dict[str, str] = dict(excluded_roots or {})

    def resolve_asset_path(self, value: str) -> str:
        path = os.path.expanduser(value)
        if self.asset_root and not os.path.isabs(path):
            path = os.path.join(self.asset_root, path)
        return os.path.normpath(path)

    def substitute(self, leaf: Leaf, kind: LeafKind, value: str) -> None:
        """
        Write one value into one leaf.

        Raises:
            SubstitutionError: WRONG_LEAF_KIND, ASSET_NOT_FOUND or
                HOST_MUTATION_FAILED
        """
        if leaf.kind is not kind.node_kind:
            raise SubstitutionError(
                SubstitutionErrorReason.WRONG_LEAF_KIND,
                leaf.name,
                f"'{leaf.name}' is a {leaf.kind.value} leaf, row asks for {kind.value}",
            )

        if leaf.kind is NodeKind.TEXT:
            try:
                self.host.prepare_text(leaf)
                self.host.set_text(leaf, value)
            except HostError as e:
                raise SubstitutionError(SubstitutionErrorReason.HOST_MUTATION_FAILED, leaf.name, str(e))
            logger.debug("  text '%s' -> '%s'", leaf.name, _preview(value))
            return

        path = self.resolve_asset_path(value)
        if not self.host.resource_exists(path):
            raise SubstitutionError(SubstitutionErrorReason.ASSET_NOT_FOUND, leaf.name, f"file not found: {path}")
        try:
            self.host.set_asset(leaf, path)
        except HostError as e:
            raise SubstitutionError(SubstitutionErrorReason.HOST_MUTATION_FAILED, leaf.name, str(e))
        logger.debug("  asset '%s' -> %s", leaf.name, path)

    def apply_row(self, row: ManifestRow, locale: str, duplicates: Mapping[str, DuplicateMap]) -> None:
        value = row.value_for(locale)
        if not value:
            self.report.skip()
            return

        dupes = duplicates.get(row.root_name)
        root = dupes.root if dupes is not None else None
        if root is None:
            reason = self.excluded_roots.get(row.root_name, "no duplicate was made")
            logger.error("[%s] No duplicated root for '%s': %s", locale, row.root_name, reason)
            self.report.fail(f"[{locale}] Root '{row.root_name}' not replicated: {reason}")
            return

        found = find_by_name(self.host, root, row.leaf_name)
        if isinstance(found, ResolutionMiss):
            logger.error("[%s] Leaf '%s' not found in '%s' tree", locale, row.leaf_name, root.name)
            self.report.fail(f"[{locale}] Leaf '{row.leaf_name}' not found in '{row.root_name}' tree")
            return

        try:
            self.substitute(found.leaf, row.kind, value)
        except SubstitutionError as e:
            logger.error("[%s] '%s' in '%s': %s", locale, row.leaf_name, found.owner.name, e)
            self.report.fail(
                f"[{locale}] Failed: '{row.leaf_name}' in '{found.owner.name}' ({row.kind.value}): {e}"
            )
            return

        self.report.apply()

    def apply_locale(self, rows: List[ManifestRow], locale: str, duplicates: Mapping[str, DuplicateMap]) -> None:
        """Apply every row for one locale. `duplicates` maps root name -> DuplicateMap."""
        for row in rows:
            self.apply_row(row, locale, duplicates)


def apply(host: HostDocument, duplicates: Mapping[str, Mapping[str, DuplicateMap]],
          rows: List[ManifestRow], locales: List[str], error_limit: int = 20,
          asset_root: Optional[str] = None) -> Report:
    """
    Apply manifest rows to already-replicated trees.

    Args:
        host: Document owning the duplicates
        duplicates: root name -> locale -> DuplicateMap
        rows: Manifest rows
        locales: Locales to process, in order
        error_limit: Max failure descriptors kept in the Report
        asset_root: Base directory for relative asset paths

    Returns:
        Report with applied/skipped/failed counts
    """
    report = ReportBuilder(error_limit=error_limit, locales=len(locales))
    substituter = Substituter(host, report, asset_root=asset_root)
    for locale in locales:
        per_root = {name: by_locale[locale] for name, by_locale in duplicates.items() if locale in by_locale}
        substituter.apply_locale(rows, locale, per_root)
    return report.build()


__all__ = ["Substituter", "apply"]
