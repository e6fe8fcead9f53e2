"""
Run orchestration: Manifest → Discovery → Ordering → Replication → Substitution.

`plan` does every read-only step and fails before anything is mutated;
`run` executes a plan inside one host transaction, locale by locale.

FATALITY:
    - ManifestError, GraphError(ROOT_NOT_FOUND): whole run, raised by `plan`
    - GraphError(CYCLIC_REFERENCE): that root only. It is excluded from
      replication and every one of its rows fails with the cycle as reason
    - HostError while replicating: whole run; the transaction is rolled
      back by hosts that support it
    - Resolution misses and SubstitutionErrors: counted in the Report
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from locrep.config import EngineConfig
from locrep.errors import GraphError, GraphErrorReason
from locrep.graph import discover, order
from locrep.host import HostDocument
from locrep.model import Container, DuplicateMap, Manifest, Report, ReportBuilder
from locrep.replicate import OutputLayout, replicate
from locrep.resolve import find_all_by_name
from locrep.substitute import Substituter

logger = logging.getLogger(__name__)


@dataclass
class RootPlan:
    """One master container and its children-first ordered subtree."""

    name: str
    container: Container
    subtree: List[Container] = field(default_factory=list)
    error: Optional[GraphError] = None

    @property
    def viable(self) -> bool:
        return self.error is None


@dataclass
class RunPlan:
    """Everything `run` needs, computed without touching the document."""

    locales: List[str]
    roots: List[RootPlan]
    warnings: List[str] = field(default_factory=list)

    @property
    def viable_roots(self) -> List[RootPlan]:
        return [r for r in self.roots if r.viable]

    @property
    def excluded(self) -> Dict[str, str]:
        return {r.name: str(r.error) for r in self.roots if not r.viable}

    @property
    def visible_count(self) -> int:
        return len(self.viable_roots) * len(self.locales)

    @property
    def hidden_count(self) -> int:
        return sum(len(r.subtree) for r in self.viable_roots) * len(self.locales)

    @property
    def total_count(self) -> int:
        return self.visible_count + self.hidden_count

    def describe(self, precomp_folder: str = "_PRECOMPS", warning_limit: int = 5) -> str:
        lines = [
            f"Languages: {', '.join(self.locales)} ({len(self.locales)})",
            f"Master containers: {', '.join(r.name for r in self.roots)}",
            f"Sub-containers discovered: {sum(len(r.subtree) for r in self.viable_roots)}",
        ]
        for name, reason in self.excluded.items():
            lines.append(f"Skipped '{name}': {reason}")
        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings[:warning_limit]:
                lines.append(f"  - {warning}")
            if len(self.warnings) > warning_limit:
                lines.append(f"  ... and {len(self.warnings) - warning_limit} more")
        lines.append(
            f"Will create {self.total_count} container(s): "
            f"{self.visible_count} in language folders + {self.hidden_count} in {precomp_folder}"
        )
        return "\n".join(lines)


def preflight(host: HostDocument, manifest: Manifest, roots: List[RootPlan]) -> List[str]:
    """
    Check every row against the ORIGINAL trees.

    Returns:
        Human-readable warnings: leaves that won't resolve, and names that
        match more than one leaf (first depth-first match wins)
    """
    by_name = {r.name: r for r in roots if r.viable}
    warnings: List[str] = []
    for row in manifest.rows:
        root_plan = by_name.get(row.root_name)
        if root_plan is None:
            continue
        matches = find_all_by_name(host, root_plan.container, row.leaf_name)
        if not matches:
            message = f"'{row.leaf_name}' not found in '{row.root_name}' tree"
        elif len(matches) > 1:
            owners = ", ".join(m.owner.name for m in matches)
            message = (f"'{row.leaf_name}' matches {len(matches)} leaves below '{row.root_name}' "
                       f"({owners}); '{matches[0].owner.name}' wins")
        else:
            continue
        if message not in warnings:
            logger.warning(message)
            warnings.append(message)
    return warnings


def plan(host: HostDocument, manifest: Manifest) -> RunPlan:
    """
    Resolve roots, discover and order their subtrees, and preflight the rows.

    Raises:
        GraphError(ROOT_NOT_FOUND): If a root named in the manifest is missing
    """
    containers = {}
    for name in manifest.root_names():
        container = host.find_container(name)
        if container is None:
            raise GraphError(GraphErrorReason.ROOT_NOT_FOUND, name)
        containers[name] = container

    roots: List[RootPlan] = []
    for name, container in containers.items():
        try:
            subtree = order(host, discover(host, container))
        except GraphError as e:
            logger.warning("Skipping '%s': %s", name, e)
            roots.append(RootPlan(name=name, container=container, error=e))
            continue
        roots.append(RootPlan(name=name, container=container, subtree=subtree))

    run_plan = RunPlan(locales=list(manifest.locales), roots=roots)
    run_plan.warnings = preflight(host, manifest, roots)
    return run_plan


def _asset_root(config: EngineConfig, manifest: Manifest) -> Optional[str]:
    if config.asset_root:
        return config.asset_root
    if manifest.source:
        return os.path.dirname(manifest.source)
    return None


def run(host: HostDocument, manifest: Manifest, config: Optional[EngineConfig] = None,
        run_plan: Optional[RunPlan] = None) -> Report:
    """
    Replicate every root for every locale and apply the manifest.

    Args:
        host: Document to mutate (duplicates are added, nothing is removed)
        manifest: Parsed manifest
        config: Engine settings (defaults apply when None)
        run_plan: Result of `plan`; computed here when None

    Returns:
        Report of the whole run

    Raises:
        GraphError(ROOT_NOT_FOUND): From `plan`
        HostError: If the host fails while replicating
    """
    config = config or EngineConfig()
    run_plan = run_plan or plan(host, manifest)

    builder = ReportBuilder(error_limit=config.error_log_limit, locales=len(run_plan.locales))
    substituter = Substituter(
        host, builder,
        asset_root=_asset_root(config, manifest),
        excluded_roots=run_plan.excluded,
    )

    with host.transaction(config.transaction_label):
        layout = OutputLayout.create(host, config.output_folder, config.precomp_folder)
        for locale in run_plan.locales:
            logger.info("=== %s ===", locale)
            duplicates: Dict[str, DuplicateMap] = {}
            for root_plan in run_plan.viable_roots:
                duplicates[root_plan.name] = replicate(
                    host, root_plan.container, root_plan.subtree, locale, layout
                )
            substituter.apply_locale(manifest.rows, locale, duplicates)

    report = builder.build()
    logger.info("Done: %d applied, %d skipped, %d failed", report.applied, report.skipped, report.failed)
    return report


__all__ = ["RootPlan", "RunPlan", "plan", "preflight", "run"]
