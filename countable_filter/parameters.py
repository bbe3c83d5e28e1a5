from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

from .strategies import StrategyRegistry
from .types import FilterOperator

if TYPE_CHECKING:
    from .filter import Filter


class ParameterFilter(ABC):
    """Strategy that applies the predicate of one filter parameter to a query."""

    @abstractmethod
    def apply(self, parameter: str, value: Any, query: Any, filter: Filter) -> None:
        """
        Restricts `query` according to `value`.

        :param parameter: Name of the filter parameter
        :param value: Validated, applicable value of the parameter
        :param query: Query to restrict, modified in place
        :param filter: Filter being applied
        """
        raise NotImplementedError


parameter_filter_registry = StrategyRegistry("application")


class FieldParameterFilter(ParameterFilter):
    """Restricts a single database field with a MongoDB operator."""

    def __init__(
        self,
        database_field: str,
        operator: FilterOperator = FilterOperator.EQ,
        transform: Callable[[Any], Any] | None = None,
    ):
        """
        :param database_field: MongoDB document field name
        :param operator: MongoDB operator for queries
        :param transform: Optional value transformation before query
        """
        self.database_field = database_field
        self.operator = FilterOperator(operator)
        self.transform = transform

    def apply(self, parameter: str, value: Any, query: Any, filter: Filter) -> None:
        transformed_value = self.transform(value) if self.transform else value
        query.where_field(self.database_field, self.operator, transformed_value)

    def __repr__(self) -> str:
        return f"FieldParameterFilter({self.database_field!r}, {self.operator.value!r})"
