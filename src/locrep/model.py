"""
Core Composition Model Objects

Defines the fundamental data structures the replication engine works on.

These are plain data classes representing:
    - Folders (grouping/location attribute)
    - Containers (compositions, frames, groups)
    - Leaves (text or external-asset content)
    - References (ordered slots inside a container)
    - Manifest rows (one substitution target with per-locale values)
    - Reports (end-of-run counts and failure descriptors)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about a specific host application
        - Carry an explicit `id`; identity is never `is`
        - Form a closed tagged variant over NodeKind
        - Represent structure, not behavior
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union


class NodeKind(Enum):
    """Tag of every node the engine can meet behind a Reference."""

    CONTAINER = "container"
    TEXT = "text"
    ASSET = "asset"


class LeafKind(Enum):
    """
    Substitution kind requested by a manifest row.

    Manifest spelling is loose ("footage" and "image" both mean ASSET);
    see `LeafKind.parse`.
    """

    TEXT = "text"
    ASSET = "asset"

    @classmethod
    def parse(cls, raw: str, default: str = "text") -> Optional["LeafKind"]:
        """
        Map a manifest `kind` cell onto a LeafKind.

        Args:
            raw: Cell content (case-insensitive)
            default: Kind used when the cell is empty

        Returns:
            LeafKind, or None if the spelling is unknown
        """
        value = (raw or "").strip().lower() or default.lower()
        return _KIND_ALIASES.get(value)

    @property
    def node_kind(self) -> NodeKind:
        return NodeKind.TEXT if self is LeafKind.TEXT else NodeKind.ASSET


_KIND_ALIASES: Dict[str, LeafKind] = {
    "text": LeafKind.TEXT,
    "asset": LeafKind.ASSET,
    "footage": LeafKind.ASSET,
    "image": LeafKind.ASSET,
}


@dataclass(eq=False)
class Folder:
    """
    Grouping attribute of a container (a project folder, a page section).

    Properties:
        id: Stable identity
        name: Display name
        parent: Enclosing folder, None for the document root
    """

    id: str
    name: str
    parent: Optional["Folder"] = None

    @property
    def path(self) -> str:
        parts = []
        folder: Optional[Folder] = self
        while folder is not None:
            parts.append(folder.name)
            folder = folder.parent
        return "/".join(reversed(parts))


@dataclass(eq=False)
class TextLeaf:
    """Terminal node holding a text string. Styling lives with the host."""

    id: str
    name: str
    text: str = ""
    missing_font: bool = False
    kind: NodeKind = field(default=NodeKind.TEXT, init=False)


@dataclass(eq=False)
class AssetLeaf:
    """Terminal node bound to an external resource (footage, image)."""

    id: str
    name: str
    path: str = ""
    kind: NodeKind = field(default=NodeKind.ASSET, init=False)


Leaf = Union[TextLeaf, AssetLeaf]


@dataclass(eq=False)
class Reference:
    """
    An ordered slot inside a Container.

    A Reference never owns its target. The same Container may be the target
    of many References across many parents (pre-composition reuse), so the
    container graph is a DAG in general, not a tree.
    """

    target: "Node"

    @property
    def kind(self) -> NodeKind:
        return self.target.kind

    @property
    def is_container(self) -> bool:
        return self.target.kind is NodeKind.CONTAINER


@dataclass(eq=False)
class Container:
    """
    Composite node owning an ordered sequence of References.

    Properties:
        id:
            Stable identity (two containers may share a name, never an id)

        name:
            Display name, the key manifest rows refer to

        references:
            Ordered slots pointing at leaves or other containers

        folder:
            Grouping/location attribute, None when at document root

    INVARIANTS:
        - The engine only ever sets `name` and `folder` on containers it
          created itself (duplicates)
        - Originals are never mutated by a replication pass
    """

    id: str
    name: str
    references: List[Reference] = field(default_factory=list, repr=False)
    folder: Optional[Folder] = None
    kind: NodeKind = field(default=NodeKind.CONTAINER, init=False)

    def child_containers(self) -> List["Container"]:
        """Containers referenced directly, in reference order (may repeat)."""
        return [ref.target for ref in self.references if ref.is_container]

    def leaves(self) -> List[Leaf]:
        """Leaves referenced directly, in reference order."""
        return [ref.target for ref in self.references if not ref.is_container]


Node = Union[Container, TextLeaf, AssetLeaf]


@dataclass(frozen=True)
class ManifestRow:
    """
    One substitution target.

    `root_name`/`leaf_name` identify the target by name only; which node a
    name resolves to is decided by deep name resolution, not by row order.

    Properties:
        root_name: Name of the master container
        leaf_name: Name of the leaf somewhere below the master
        kind: Requested substitution kind
        values: locale -> replacement value ("" means skip)
        line: 1-based physical line of the row in the manifest source
    """

    root_name: str
    leaf_name: str
    kind: LeafKind
    values: Dict[str, str] = field(default_factory=dict)
    line: int = 0

    def value_for(self, locale: str) -> str:
        return self.values.get(locale, "")


@dataclass
class Manifest:
    """Parsed manifest: the header, its locales and the typed rows."""

    headers: List[str]
    locales: List[str]
    rows: List[ManifestRow] = field(default_factory=list)
    source: Optional[str] = None

    def root_names(self) -> List[str]:
        """Unique root names in first-appearance order."""
        seen: Dict[str, None] = {}
        for row in self.rows:
            seen.setdefault(row.root_name, None)
        return list(seen)


@dataclass(frozen=True)
class Resolution:
    """A leaf found by name together with the container that owns it."""

    leaf: Leaf
    owner: Container


@dataclass(frozen=True)
class ResolutionMiss:
    """
    Deep name resolution found nothing.

    Not an error by itself: substitution counts it as a failure and moves on.
    """

    root_name: str
    leaf_name: str

    def __bool__(self) -> bool:
        return False


class DuplicateMap:
    """
    Per-locale mapping from original containers to their duplicates.

    Keyed by original container id. Lives for one replication pass.
    """

    def __init__(self, locale: str, root: Container):
        self.locale = locale
        self.original_root = root
        self._pairs: Dict[str, Tuple[Container, Container]] = {}

    def add(self, original: Container, duplicate: Container) -> None:
        self._pairs[original.id] = (original, duplicate)

    def get(self, original: Container) -> Optional[Container]:
        pair = self._pairs.get(original.id)
        return pair[1] if pair else None

    def by_name(self, name: str) -> Optional[Container]:
        """Duplicate of the original container called `name`."""
        for original, duplicate in self._pairs.values():
            if original.name == name:
                return duplicate
        return None

    @property
    def root(self) -> Optional[Container]:
        return self.get(self.original_root)

    def __contains__(self, original: Container) -> bool:
        return original.id in self._pairs

    def __iter__(self) -> Iterator[Tuple[Container, Container]]:
        return iter(self._pairs.values())

    def __len__(self) -> int:
        return len(self._pairs)


@dataclass(frozen=True)
class Report:
    """
    End-of-run summary. Immutable once built.

    `errors` holds at most the configured number of descriptors; `failed`
    keeps counting past that cap.
    """

    locales: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0
    errors: Tuple[str, ...] = ()

    def summary(self) -> str:
        lines = [
            f"Locales: {self.locales}",
            f"Applied: {self.applied}",
            f"Skipped: {self.skipped}",
            f"Failed: {self.failed}",
        ]
        if self.errors:
            lines.append("")
            lines.append("-- Failures --")
            lines.extend(self.errors)
            if self.failed > len(self.errors):
                lines.append(f"... and {self.failed - len(self.errors)} more")
        return "\n".join(lines)


@dataclass
class ReportBuilder:
    """Mutable accumulator behind a Report."""

    error_limit: int = 20
    locales: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def apply(self) -> None:
        self.applied += 1

    def skip(self) -> None:
        self.skipped += 1

    def fail(self, descriptor: str) -> None:
        self.failed += 1
        if len(self.errors) < self.error_limit:
            self.errors.append(descriptor)

    def build(self) -> Report:
        return Report(
            locales=self.locales,
            applied=self.applied,
            skipped=self.skipped,
            failed=self.failed,
            errors=tuple(self.errors),
        )
