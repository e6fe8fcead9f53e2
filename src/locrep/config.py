"""
Engine configuration.

Settings are plain data loaded from YAML:

    output_folder: Localized_Versions
    precomp_folder: _PRECOMPS
    error_log_limit: 20
    default_kind: text
    asset_root: ./assets
    transaction_label: Batch Asset Replacer

Every key is optional; unknown keys are rejected so typos surface early.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

import yaml

from locrep.errors import ConfigError
from locrep.model import LeafKind


@dataclass
class EngineConfig:
    """
    Properties:
        output_folder: Top-level folder for every duplicate
        precomp_folder: Hidden folder (inside output_folder) for non-root duplicates
        error_log_limit: Max failure descriptors kept in a Report
        default_kind: Kind of rows whose kind cell is empty
        asset_root: Base directory for relative asset paths
            (None: the manifest's directory, else the working directory)
        transaction_label: Name of the undo group wrapping a run
    """

    output_folder: str = "Localized_Versions"
    precomp_folder: str = "_PRECOMPS"
    error_log_limit: int = 20
    default_kind: str = "text"
    asset_root: Optional[str] = None
    transaction_label: str = "Batch Asset Replacer"

    def __post_init__(self) -> None:
        if not self.output_folder or not self.precomp_folder:
            raise ConfigError("output_folder and precomp_folder must be non-empty")
        if not isinstance(self.error_log_limit, int) or self.error_log_limit < 0:
            raise ConfigError(f"error_log_limit must be a non-negative integer, got {self.error_log_limit!r}")
        if LeafKind.parse(self.default_kind) is None:
            raise ConfigError(f"default_kind '{self.default_kind}' is not a known kind")

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "EngineConfig":
        d = d or {}
        if not isinstance(d, dict):
            raise ConfigError(f"configuration must be a mapping, got {type(d).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(unknown)}")
        return cls(**d)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: str) -> EngineConfig:
    """
    Load an EngineConfig from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the YAML is invalid or holds unknown keys
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    return EngineConfig.from_dict(data)


__all__ = ["EngineConfig", "load_config"]
