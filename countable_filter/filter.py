from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar

from .data import FilterData
from .exceptions import FilterParameterUnhandledError
from .parameters import ParameterFilter, parameter_filter_registry
from .strategies import StrategyRegistry, normalize_strategy, resolve_strategies
from .types import ApplyStrategy

logger = logging.getLogger(__name__)


def as_names(names: str | Iterable[str]) -> list[str]:
    if isinstance(names, str):
        return [names]
    return list(names)


class Filter:
    """
    Applies the predicates of filter parameters to a query.

    Subclasses declare their parameters through `defaults` and how each one is applied through
    :meth:`strategies`. A parameter without a strategy is handed to :meth:`apply_parameter`.
    """

    defaults: ClassVar[dict[str, Any]] = {}
    """Known filter parameters with their default values, in application order."""

    strategy_registry: ClassVar[StrategyRegistry] = parameter_filter_registry

    def __init__(self, data: FilterData | Mapping[str, Any] | None = None):
        """
        :param data: Filter values, either validated already or raw
        """
        if not isinstance(data, FilterData):
            data = FilterData(data, defaults=self.defaults)
        self.data = data
        self._strategies: dict[str, ApplyStrategy] = dict(self.strategies())
        self._ignored_parameters: set[str] = set()

    def strategies(self) -> dict[str, ApplyStrategy]:
        """
        Initial application strategies per parameter. Override this to set the strategies for your filter.

        A strategy is a :class:`ParameterFilter`, a class of one, an identifier registered in
        `strategy_registry`, a callable ``(parameter, value, query, filter)`` or None.
        """
        return {}

    def build_strategies(self) -> dict[str, ApplyStrategy]:
        """Instantiates the class and identifier strategies, once per filter instance.

        :raises ParameterStrategyInvalidError: If a strategy cannot be instantiated
        """
        resolve_strategies(self._strategies, ParameterFilter, self.strategy_registry)
        return self._strategies

    def apply(self, query: Any, exclude: str | None = None) -> Any:
        """
        Applies every applicable filter parameter to `query`.

        :param query: Query to restrict, modified in place
        :param exclude: Parameter to leave out for this application only
        :return: The query
        :raises ParameterStrategyInvalidError: If a strategy is not usable
        :raises FilterParameterUnhandledError: If a parameter without a strategy reaches the fallback
        """
        strategies = self.build_strategies()

        for parameter, value in self.data.get_applicable_attributes().items():
            if parameter == exclude or self.is_parameter_ignored(parameter):
                continue

            strategy = normalize_strategy(
                parameter,
                strategies.get(parameter),
                ParameterFilter,
                "apply",
                self._apply_parameter_fallback,
                self.strategy_registry.kind,
            )
            strategy(parameter, value, query, self)

        return query

    def _apply_parameter_fallback(self, parameter: str, value: Any, query: Any, filter: Filter) -> None:
        self.apply_parameter(parameter, value, query)

    def apply_parameter(self, parameter: str, value: Any, query: Any) -> None:
        """
        Applies a parameter that has no strategy. This is the fallback for parameters missing
        from :meth:`strategies`; override it if your filter handles such parameters itself.

        :raises FilterParameterUnhandledError: Always, unless overridden
        """
        raise FilterParameterUnhandledError(f"No fallback strategy determined for filter parameter '{parameter}'")

    def ignore_parameter(self, parameter: str | Iterable[str]) -> Filter:
        """
        Stops one or more parameters from being applied, until they are unignored.

        :return: Self for method chaining
        """
        self._ignored_parameters.update(as_names(parameter))
        return self

    def unignore_parameter(self, parameter: str | Iterable[str]) -> Filter:
        """
        :return: Self for method chaining
        """
        self._ignored_parameters.difference_update(as_names(parameter))
        return self

    def is_parameter_ignored(self, parameter: str) -> bool:
        if not self._ignored_parameters:
            return False
        return parameter in self._ignored_parameters

    @property
    def ignored_parameters(self) -> set[str]:
        return self._ignored_parameters.copy()

    def get_parameter_value(self, parameter: str, default: Any = None) -> Any:
        return self.data.get_parameter_value(parameter, default)
