"""Countable filters described by data instead of code.

A definition lists the parameters of a filter over one MongoDB collection, e.g. in YAML::

    name: products
    collection: products
    parameters:
      - name: brand
        operator: $in
        countable: true
      - name: price_max
        database_field: price
        operator: $lte
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, Field, field_validator

from .countable import MongoCountableFilter
from .counters import DistinctValueCounter
from .parameters import FieldParameterFilter
from .types import ApplyStrategy, CountStrategy, FilterOperator

DISTINCT_STRATEGY = "distinct"


class ParameterDefinition(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the filter parameter, as used in the filter data.")
    database_field: str | None = Field(  # noqa: UP007
        None, description="Document field the parameter restricts. Defaults to `name`."
    )
    operator: FilterOperator = Field(FilterOperator.EQ, description="MongoDB operator of the predicate.")
    default: Any = Field(None, description="Value used when the filter data does not provide one.")
    countable: bool = Field(False, description="Whether alternative counts are computed for the parameter.")
    count_strategy: str | None = Field(  # noqa: UP007
        DISTINCT_STRATEGY,
        description="Identifier of the counting strategy in the counter registry."
        + " If set to `null`, the matching documents are counted.",
    )
    count_field: str | None = Field(  # noqa: UP007
        None, description="Field the `distinct` strategy groups by. Defaults to `database_field`."
    )
    unwind: bool = Field(False, description="Whether the `distinct` strategy counts array items separately.")

    @property
    def field(self) -> str:
        return self.database_field or self.name


class FilterDefinition(BaseModel):
    name: str = Field(..., min_length=1)
    collection: str = Field(..., min_length=1, description="Name of the MongoDB collection to filter.")
    parameters: list[ParameterDefinition] = Field(default_factory=list)

    @field_validator("parameters")
    @classmethod
    def _unique_parameter_names(cls, parameters: list[ParameterDefinition]) -> list[ParameterDefinition]:
        seen: set[str] = set()
        for parameter in parameters:
            if parameter.name in seen:
                raise ValueError(f"Duplicate parameter name '{parameter.name}'")
            seen.add(parameter.name)
        return parameters

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> FilterDefinition:
        with Path(yaml_path).open("r") as handle:
            return cls.model_validate(yaml.safe_load(handle))

    def get_parameter(self, name: str) -> ParameterDefinition | None:
        return next((p for p in self.parameters if p.name == name), None)


class DeclarativeFilter(MongoCountableFilter):
    """Base of the filter classes built by :func:`build_filter_class`."""

    definition: ClassVar[FilterDefinition]

    def strategies(self) -> dict[str, ApplyStrategy]:
        return {p.name: FieldParameterFilter(p.field, p.operator) for p in self.definition.parameters}

    def count_strategies(self) -> dict[str, CountStrategy]:
        strategies: dict[str, CountStrategy] = {}
        for parameter in self.definition.parameters:
            if not parameter.countable:
                continue
            if parameter.count_strategy == DISTINCT_STRATEGY:
                strategies[parameter.name] = DistinctValueCounter(
                    field=parameter.count_field or parameter.field, unwind=parameter.unwind
                )
            else:
                strategies[parameter.name] = parameter.count_strategy
        return strategies

    def count_parameter(self, parameter: str, query: Any) -> int:
        return query.count()


def _class_name(name: str) -> str:
    return "".join(part.capitalize() for part in re.split(r"[^0-9a-zA-Z]+", name) if part) + "Filter"


def build_filter_class(definition: FilterDefinition | dict[str, Any]) -> type[DeclarativeFilter]:
    """
    Builds a countable filter class from a definition.

    :param definition: Definition, or a dictionary to validate into one
    :return: Subclass of :class:`DeclarativeFilter`; instantiate it with the filter data and a collection
    """
    if not isinstance(definition, FilterDefinition):
        definition = FilterDefinition.model_validate(definition)

    namespace = {
        "definition": definition,
        "defaults": {p.name: p.default for p in definition.parameters},
        "countables": tuple(p.name for p in definition.parameters if p.countable),
    }
    return type(_class_name(definition.name), (DeclarativeFilter,), namespace)
