from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Configuration(BaseSettings):
    """
    Class that holds configuration.
    While not a singleton, the `config` instance from this module is meant to be primarily used.
    """

    model_config = SettingsConfigDict(env_prefix="countable_filter_")

    log_filepath: Path = Field(
        "./countable_filter.log",
        description="Path to the file, relative to working directory, where the log of the CLI will be stored.",
    )
    explicit_countables_override_ignore: bool = Field(
        False,
        description="If true, countables requested explicitly in `get_counts()` are counted even when they are ignored."
        + " If false, the ignore list always wins.",
    )
    max_string_value_length: int = Field(
        1000,
        description="Maximum length of a string value accepted as filter input.",
        gt=0,
    )
    max_array_length: int = Field(
        100,
        description="Maximum number of items of a list value accepted as filter input.",
        gt=0,
    )
    mongo_uri: str = Field(
        "mongodb://localhost:27017",
        description="MongoDB connection string used by the CLI.",
    )
    mongo_database: str | None = Field(  # noqa: UP007
        None,
        description="MongoDB database used by the CLI. If set to `null`, the default database of `mongo_uri` is used.",
    )

    def _get_nondefault_keys(self) -> set[str]:
        """
        Returns keys of the config that have non-default value, i.e. were provided as kwargs, env. vars. or additionaly set.
        """
        return {key for key, value in Configuration.model_fields.items() if getattr(self, key) != value.default}

    def _set_attrs_from_cfg(self, other_cfg: Configuration, fields_to_set: set[str] | None) -> None:
        if not fields_to_set:
            fields_to_set = set(Configuration.model_fields.keys())
        for field in [x for x in Configuration.model_fields if x in fields_to_set]:
            setattr(self, field, getattr(other_cfg, field))

    def load_from_yaml(self, yaml_path: str | Path) -> None:
        """
        Will read configuration keys from `yaml_path` and overwrite the corresponding keys in `self`.
        Also, will check environment variables with `countable_filter_` prefix.

        :param str | Path yaml_path: path to yaml to read for configuration.
        """
        with Path(yaml_path).open("r") as handle:
            data = yaml.safe_load(handle) or {}
        other_cfg = Configuration(**data)
        keys_to_rewrite = set(data.keys()).union(other_cfg._get_nondefault_keys())
        self._set_attrs_from_cfg(other_cfg, keys_to_rewrite)

    def reset(self) -> None:
        """
        Restores every key to its default value, environment variables included.
        """
        self._set_attrs_from_cfg(Configuration(), None)

    def to_yaml(self, yaml_path: str | Path) -> None:
        """
        Will dump the configuration to yaml file.

        :param str | Path yaml_path: path where the configuration will be dumped.
        """
        model_dict = json.loads(self.model_dump_json())  # to assure that we have serializable values
        with Path(yaml_path).open("w") as handle:
            yaml.safe_dump(model_dict, handle)


config = Configuration()
