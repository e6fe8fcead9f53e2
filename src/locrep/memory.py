"""
In-memory host document.

A complete HostDocument that keeps containers, leaves and folders in plain
Python lists. It backs the CLI (documents are loaded from JSON/YAML, see
`locrep.serialization`) and every engine test.

Host policy:
    - Names are not unique; `find_container` returns the first container
      created with that name
    - Cloning copies leaves and shares child containers
    - A failed outermost transaction removes every container and folder
      created inside it (leaf edits are not undone)
"""

import logging
import os
from contextlib import contextmanager
from copy import copy
from typing import Callable, Dict, Iterator, List, Optional

from locrep.errors import HostError
from locrep.host import HostDocument
from locrep.model import AssetLeaf, Container, Folder, Leaf, Node, NodeKind, Reference, TextLeaf

logger = logging.getLogger(__name__)


class InMemoryDocument(HostDocument):
    """Host document living entirely in memory."""

    def __init__(self, resource_exists: Optional[Callable[[str], bool]] = None):
        self.containers: List[Container] = []
        self.folders: List[Folder] = []
        self.leaves: Dict[str, Leaf] = {}
        self.transactions: List[str] = []
        self._exists = resource_exists or os.path.exists
        self._counter = 0
        self._depth = 0

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _new_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    def add_container(self, name: str, folder: Optional[Folder] = None, node_id: Optional[str] = None) -> Container:
        container = Container(id=node_id or self._new_id("c"), name=name, folder=folder)
        self.containers.append(container)
        return container

    def add_text(self, container: Container, name: str, text: str = "",
                 missing_font: bool = False, node_id: Optional[str] = None) -> TextLeaf:
        leaf = TextLeaf(id=node_id or self._new_id("t"), name=name, text=text, missing_font=missing_font)
        self._attach_leaf(container, leaf)
        return leaf

    def add_asset(self, container: Container, name: str, path: str = "", node_id: Optional[str] = None) -> AssetLeaf:
        leaf = AssetLeaf(id=node_id or self._new_id("a"), name=name, path=path)
        self._attach_leaf(container, leaf)
        return leaf

    def add_reference(self, container: Container, target: Node) -> Reference:
        if target.kind is NodeKind.CONTAINER:
            self._require_owned(target)
        else:
            self.leaves.setdefault(target.id, target)
        ref = Reference(target=target)
        container.references.append(ref)
        return ref

    def _attach_leaf(self, container: Container, leaf: Leaf) -> None:
        self.leaves[leaf.id] = leaf
        container.references.append(Reference(target=leaf))

    def bump_ids(self, seen: int) -> None:
        """Keep generated ids clear of ids loaded from a saved document."""
        self._counter = max(self._counter, seen)

    def containers_in(self, folder: Optional[Folder]) -> List[Container]:
        folder_id = folder.id if folder else None
        return [c for c in self.containers if (c.folder.id if c.folder else None) == folder_id]

    def find_folder(self, name: str, parent: Optional[Folder] = None) -> Optional[Folder]:
        parent_id = parent.id if parent else None
        for folder in self.folders:
            if folder.name == name and (folder.parent.id if folder.parent else None) == parent_id:
                return folder
        return None

    def _require_owned(self, container: Container) -> None:
        if not any(c.id == container.id for c in self.containers):
            raise HostError(f"container '{container.name}' ({container.id}) does not belong to this document")

    # ------------------------------------------------------------------
    # HostDocument primitives
    # ------------------------------------------------------------------

    def find_container(self, name: str) -> Optional[Container]:
        for container in self.containers:
            if container.name == name:
                return container
        return None

    def references(self, container: Container) -> List[Reference]:
        return list(container.references)

    def clone_container(self, container: Container) -> Container:
        self._require_owned(container)
        clone = self.add_container(container.name, folder=container.folder)
        for ref in container.references:
            if ref.is_container:
                clone.references.append(Reference(target=ref.target))
            else:
                leaf = copy(ref.target)
                leaf.id = self._new_id("t" if leaf.kind is NodeKind.TEXT else "a")
                self._attach_leaf(clone, leaf)
        logger.debug("Cloned %s (%s) -> %s", container.name, container.id, clone.id)
        return clone

    def set_reference_target(self, container: Container, index: int, target: Node) -> None:
        self._require_owned(container)
        if not 0 <= index < len(container.references):
            raise HostError(f"'{container.name}' has no reference #{index}")
        container.references[index].target = target

    def rename(self, container: Container, name: str) -> None:
        self._require_owned(container)
        container.name = name

    def move(self, container: Container, folder: Optional[Folder]) -> None:
        self._require_owned(container)
        container.folder = folder

    def ensure_folder(self, name: str, parent: Optional[Folder] = None) -> Folder:
        folder = self.find_folder(name, parent)
        if folder is None:
            folder = Folder(id=self._new_id("f"), name=name, parent=parent)
            self.folders.append(folder)
        return folder

    def get_text(self, leaf: TextLeaf) -> str:
        return leaf.text

    def set_text(self, leaf: TextLeaf, text: str) -> None:
        if leaf.kind is not NodeKind.TEXT:
            raise HostError(f"'{leaf.name}' is not a text leaf")
        leaf.text = text

    def get_asset(self, leaf: AssetLeaf) -> str:
        return leaf.path

    def set_asset(self, leaf: AssetLeaf, path: str) -> None:
        if leaf.kind is not NodeKind.ASSET:
            raise HostError(f"'{leaf.name}' is not an asset leaf")
        leaf.path = path

    def resource_exists(self, path: str) -> bool:
        return self._exists(path)

    def prepare_text(self, leaf: TextLeaf) -> None:
        if leaf.missing_font:
            raise HostError(f"'{leaf.name}' uses a font that is not available")

    @contextmanager
    def transaction(self, label: str) -> Iterator[None]:
        outermost = self._depth == 0
        containers_before = len(self.containers)
        folders_before = len(self.folders)
        if outermost:
            self.transactions.append(f"begin:{label}")
        self._depth += 1
        try:
            yield
        except Exception:
            if outermost:
                self._rollback(containers_before, folders_before)
                self.transactions.append(f"rollback:{label}")
            raise
        else:
            if outermost:
                self.transactions.append(f"end:{label}")
        finally:
            self._depth -= 1

    def _rollback(self, containers_before: int, folders_before: int) -> None:
        dropped = self.containers[containers_before:]
        del self.containers[containers_before:]
        del self.folders[folders_before:]
        for container in dropped:
            for leaf in container.leaves():
                self.leaves.pop(leaf.id, None)
        logger.info("Rolled back %d container(s)", len(dropped))


__all__ = ["InMemoryDocument"]
