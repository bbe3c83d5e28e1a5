"""Query filters with alternative (faceted) counts per filter parameter."""

from .countable import CountableFilter, MongoCountableFilter
from .counters import DistinctValueCounter, DocumentCounter, ParameterCounter, counter_registry
from .data import FilterData
from .declarative import DeclarativeFilter, FilterDefinition, ParameterDefinition, build_filter_class
from .exceptions import (
    FilterDataValidationError,
    FilterError,
    FilterParameterUnhandledError,
    ParameterStrategyInvalidError,
)
from .filter import Filter
from .parameters import FieldParameterFilter, ParameterFilter, parameter_filter_registry
from .query import FieldValidationError, MongoQuery, ValueValidationError
from .results import CountableResults
from .strategies import StrategyRegistry
from .types import FilterOperator

__all__ = [
    "CountableFilter",
    "CountableResults",
    "DeclarativeFilter",
    "DistinctValueCounter",
    "DocumentCounter",
    "FieldParameterFilter",
    "FieldValidationError",
    "Filter",
    "FilterData",
    "FilterDataValidationError",
    "FilterDefinition",
    "FilterError",
    "FilterOperator",
    "FilterParameterUnhandledError",
    "MongoCountableFilter",
    "MongoQuery",
    "ParameterCounter",
    "ParameterDefinition",
    "ParameterFilter",
    "ParameterStrategyInvalidError",
    "StrategyRegistry",
    "ValueValidationError",
    "build_filter_class",
    "counter_registry",
    "parameter_filter_registry",
]
