from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

import countable_filter.configuration as config_module


@pytest.fixture
def simple_config_dict() -> dict[str, Any]:
    return {
        "explicit_countables_override_ignore": True,
        "max_array_length": 42,
    }


@pytest.fixture
def simple_config_yaml(simple_config_dict, tmp_path) -> Path:
    yaml_path = tmp_path / "config.yaml"
    with yaml_path.open("w") as handle:
        yaml.safe_dump(simple_config_dict, handle)
    return yaml_path


def test_config_from_yaml(simple_config_dict, simple_config_yaml: Path) -> None:
    config_module.config.load_from_yaml(simple_config_yaml)

    for key, val in simple_config_dict.items():
        assert getattr(config_module.config, key) == val


def test_load_env_values(simple_config_dict, simple_config_yaml, monkeypatch):
    monkeypatch.setenv("COUNTABLE_FILTER_LOG_FILEPATH", "/some/nonsense/path")
    monkeypatch.setenv("COUNTABLE_FILTER_MAX_ARRAY_LENGTH", "10")

    config_module.config.load_from_yaml(simple_config_yaml)

    # this should also beat the env set above
    for key, val in simple_config_dict.items():
        assert getattr(config_module.config, key) == val

    assert config_module.config.log_filepath == Path("/some/nonsense/path")


def test_complex_config_load(simple_config_dict, simple_config_yaml, monkeypatch):
    config_module.config.max_string_value_length = 123456789
    config_module.config.mongo_database = "shop"
    monkeypatch.setenv("COUNTABLE_FILTER_MONGO_DATABASE", "warehouse")

    config_module.config.load_from_yaml(simple_config_yaml)
    for key, val in simple_config_dict.items():
        assert getattr(config_module.config, key) == val

    # max_string_value_length should not get overwritten
    assert config_module.config.max_string_value_length == 123456789

    # mongo_database should get overwritten
    assert config_module.config.mongo_database == "warehouse"


def test_invalid_value_rejected(tmp_path) -> None:
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("max_array_length: -1\n")

    with pytest.raises(ValueError):
        config_module.config.load_from_yaml(yaml_path)


def test_to_yaml_round_trip(tmp_path) -> None:
    config_module.config.max_array_length = 7
    yaml_path = tmp_path / "dumped.yaml"

    config_module.config.to_yaml(yaml_path)

    with yaml_path.open("r") as handle:
        dumped = yaml.safe_load(handle)
    assert dumped["max_array_length"] == 7
    assert dumped["explicit_countables_override_ignore"] is False


def test_reset_restores_defaults() -> None:
    config_module.config.explicit_countables_override_ignore = True

    config_module.config.reset()

    assert config_module.config.explicit_countables_override_ignore is False
