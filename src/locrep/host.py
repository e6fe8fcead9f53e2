"""
Host document interface.

The engine never touches a host application directly. Everything it needs
from the document that stores containers and leaves goes through this
small set of primitives, so the engine can run against an After Effects
bridge, a Figma bridge or the in-memory document used by the tests.

DO NOT:
    - Add UI, rendering or persistence calls here
    - Add engine logic here (discovery, ordering and relinking belong to
      the engine modules)

Every primitive may raise HostError.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from locrep.model import AssetLeaf, Container, Folder, Leaf, Node, NodeKind, Reference, TextLeaf


class HostDocument(ABC):
    """Primitives a host document exposes to the engine."""

    @abstractmethod
    def find_container(self, name: str) -> Optional[Container]:
        """First container called `name`, or None."""

    @abstractmethod
    def references(self, container: Container) -> List[Reference]:
        """Ordered references of a container."""

    @abstractmethod
    def clone_container(self, container: Container) -> Container:
        """
        Deep-clone a container.

        The clone has a new identity, fresh copies of every leaf, and
        references to the SAME child containers as the original. Relinking
        those references is the engine's job.
        """

    @abstractmethod
    def set_reference_target(self, container: Container, index: int, target: Node) -> None:
        """Point reference `index` of `container` at `target`."""

    @abstractmethod
    def rename(self, container: Container, name: str) -> None:
        """Set a container's display name."""

    @abstractmethod
    def move(self, container: Container, folder: Optional[Folder]) -> None:
        """Set a container's grouping/location attribute."""

    @abstractmethod
    def ensure_folder(self, name: str, parent: Optional[Folder] = None) -> Folder:
        """Find the folder `name` directly under `parent`, creating it if needed."""

    @abstractmethod
    def get_text(self, leaf: TextLeaf) -> str:
        """Text content of a text leaf."""

    @abstractmethod
    def set_text(self, leaf: TextLeaf, text: str) -> None:
        """Replace text content, leaving styling untouched."""

    @abstractmethod
    def get_asset(self, leaf: AssetLeaf) -> str:
        """Locator of the resource bound to an asset leaf."""

    @abstractmethod
    def set_asset(self, leaf: AssetLeaf, path: str) -> None:
        """Rebind an asset leaf to another resource."""

    @abstractmethod
    def resource_exists(self, path: str) -> bool:
        """Whether an external resource exists."""

    def prepare_text(self, leaf: TextLeaf) -> None:
        """
        Make a text leaf writable (load its fonts, for example).

        Called once before every text mutation. Hosts without such a step
        keep this no-op.
        """

    @contextmanager
    def transaction(self, label: str) -> Iterator[None]:
        """
        Group every mutation made inside the block into one undoable unit.

        Hosts without undo support keep this pass-through.
        """
        yield

    def leaf_value(self, leaf: Leaf) -> str:
        if leaf.kind is NodeKind.TEXT:
            return self.get_text(leaf)
        return self.get_asset(leaf)


__all__ = ["HostDocument"]
