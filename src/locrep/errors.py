"""
Error taxonomy for the replication engine.

Fatal errors (ManifestError, GraphError.ROOT_NOT_FOUND, ConfigError) propagate
to the caller before anything is mutated. GraphError.CYCLIC_REFERENCE is fatal
for the root being processed only. SubstitutionError never escapes a run: it
is turned into a Report entry.
"""

from enum import Enum
from typing import List, Optional


class LocRepError(Exception):
    """Base class for every error raised by locrep."""
    pass


class ConfigError(LocRepError):
    """Raised when an engine configuration file is invalid."""
    pass


class HostError(LocRepError):
    """Raised by a host document when one of its primitives fails."""
    pass


class ManifestErrorReason(Enum):
    NO_LOCALE_COLUMNS = "NoLocaleColumns"
    MALFORMED_ROW = "MalformedRow"


class ManifestError(LocRepError):
    """Raised when the manifest cannot drive a run."""

    def __init__(self, reason: ManifestErrorReason, message: str, line: Optional[int] = None):
        self.reason = reason
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"{reason.value}: {message}{where}")


class GraphErrorReason(Enum):
    CYCLIC_REFERENCE = "CyclicReference"
    ROOT_NOT_FOUND = "RootNotFound"
    UNORDERED_SUBTREE = "UnorderedSubtree"


class GraphError(LocRepError):
    """
    Raised when a container graph cannot be replicated.

    Attributes:
        reason: GraphErrorReason
        container: Name of the offending container
        cycle: Container names forming the cycle, first name repeated last
    """

    def __init__(self, reason: GraphErrorReason, container: str, cycle: Optional[List[str]] = None):
        self.reason = reason
        self.container = container
        self.cycle = list(cycle or [])
        if reason is GraphErrorReason.CYCLIC_REFERENCE and self.cycle:
            detail = f"'{container}' is part of a reference cycle: {' -> '.join(self.cycle)}"
        elif reason is GraphErrorReason.CYCLIC_REFERENCE:
            detail = f"'{container}' is part of a reference cycle"
        elif reason is GraphErrorReason.UNORDERED_SUBTREE:
            detail = f"'{container}' must be duplicated before its parent; subtree is not ordered children-first"
        else:
            detail = f"container '{container}' not found in document"
        super().__init__(f"{reason.value}: {detail}")


class SubstitutionErrorReason(Enum):
    ASSET_NOT_FOUND = "AssetNotFound"
    WRONG_LEAF_KIND = "WrongLeafKind"
    HOST_MUTATION_FAILED = "HostMutationFailed"


class SubstitutionError(LocRepError):
    """Raised when one leaf substitution fails. Always non-fatal for the run."""

    def __init__(self, reason: SubstitutionErrorReason, leaf_name: str, message: str):
        self.reason = reason
        self.leaf_name = leaf_name
        super().__init__(f"{reason.value}: {message}")


__all__ = [
    "LocRepError",
    "ConfigError",
    "HostError",
    "ManifestError",
    "ManifestErrorReason",
    "GraphError",
    "GraphErrorReason",
    "SubstitutionError",
    "SubstitutionErrorReason",
]
