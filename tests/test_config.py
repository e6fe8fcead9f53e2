"""
Tests for engine configuration loading.
"""

import pytest

from locrep.config import EngineConfig, load_config
from locrep.errors import ConfigError


def test_defaults():
    config = EngineConfig()
    assert config.output_folder == "Localized_Versions"
    assert config.precomp_folder == "_PRECOMPS"
    assert config.error_log_limit == 20
    assert config.default_kind == "text"
    assert config.asset_root is None


def test_load_yaml(tmp_path):
    path = tmp_path / "locrep.yaml"
    path.write_text("output_folder: Out\nerror_log_limit: 5\nasset_root: /media\n", encoding="utf-8")
    config = load_config(str(path))
    assert config.output_folder == "Out"
    assert config.error_log_limit == 5
    assert config.asset_root == "/media"
    assert config.precomp_folder == "_PRECOMPS"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == EngineConfig()


def test_unknown_key(tmp_path):
    path = tmp_path / "typo.yaml"
    path.write_text("output_foldr: Out\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="output_foldr"):
        load_config(str(path))


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("output_folder: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_not_a_mapping():
    with pytest.raises(ConfigError):
        EngineConfig.from_dict(["a", "b"])


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "none.yaml"))


@pytest.mark.parametrize("kwargs", [
    {"error_log_limit": -1},
    {"default_kind": "video"},
    {"output_folder": ""},
])
def test_invalid_values(kwargs):
    with pytest.raises(ConfigError):
        EngineConfig(**kwargs)


def test_round_trip():
    config = EngineConfig(default_kind="footage", transaction_label="Localize")
    assert EngineConfig.from_dict(config.to_dict()) == config
