from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, ClassVar

from pymongo.collection import Collection

from .configuration import config
from .counters import ParameterCounter, counter_registry
from .data import FilterData
from .exceptions import FilterParameterUnhandledError
from .filter import Filter, as_names
from .query import MongoQuery
from .results import CountableResults
from .strategies import StrategyRegistry, normalize_strategy, resolve_strategies
from .types import CountStrategy

logger = logging.getLogger(__name__)


class CountableFilter(Filter, ABC):
    """
    Filter that can also tell how many records would match if *only* one of its parameters changed.

    If you're filtering by, say, product line and brand, the counts hold the number of matches
    for all brands that also match the product line selection, and the number of matches for
    all product lines that also match the brand selection.
    """

    countables: ClassVar[Sequence[str]] = ()
    """Parameters to compute alternative counts for, in result order."""

    counter_registry: ClassVar[StrategyRegistry] = counter_registry

    def __init__(self, data: FilterData | Mapping[str, Any] | None = None):
        super().__init__(data)
        self._count_strategies: dict[str, CountStrategy] = dict(self.count_strategies())
        self._ignored_countables: set[str] = set()

    @abstractmethod
    def get_countable_base_query(self, parameter: str | None = None) -> Any:
        """
        Returns a new, unfiltered query to build the count for `parameter` on.
        Called once per countable, so it must never hand out a query that was used before.

        :param parameter: Name of the countable parameter
        """
        raise NotImplementedError("Not meant to be implemented by the base class.")

    def count_strategies(self) -> dict[str, CountStrategy]:
        """
        Initial counting strategies per countable. Override this to set the strategies for your filter.

        A strategy is one of:
            - a :class:`ParameterCounter` instance,
            - a :class:`ParameterCounter` class or an identifier registered in `counter_registry`,
              instantiated without arguments on first use,
            - a callable ``(parameter, query, filter) -> result``,
            - None, in which case :meth:`count_parameter` handles the countable.
        """
        return {}

    def get_countables(self) -> list[str]:
        return list(self.countables)

    def get_active_countables(self) -> list[str]:
        """Countables that are not ignored, in declaration order."""
        return [countable for countable in self.get_countables() if not self.is_countable_ignored(countable)]

    def build_countable_strategies(self) -> dict[str, CountStrategy]:
        """Instantiates the class and identifier counting strategies, once per filter instance.

        :raises ParameterStrategyInvalidError: If a strategy cannot be instantiated
        """
        resolve_strategies(self._count_strategies, ParameterCounter, self.counter_registry)
        return self._count_strategies

    def get_counts(
        self, countables: str | Iterable[str] | None = None, *, override_ignored: bool | None = None
    ) -> CountableResults:
        """
        Gets alternative counts per countable for the filter data.

        For every countable, a fresh base query gets all other parameters applied and is handed
        to the countable's strategy. Any error aborts the whole call; no partial results are returned.

        :param countables: Limits the result to these countables. Undeclared names are dropped.
        :param override_ignored: Whether explicitly requested countables are counted even when ignored.
            Defaults to `config.explicit_countables_override_ignore`.
        :return: Results in declaration order of the countables
        :raises ParameterStrategyInvalidError: If a counting strategy is not usable
        :raises FilterParameterUnhandledError: If a countable without strategy reaches the default fallback
        """
        counts = CountableResults()
        strategies = self.build_countable_strategies()

        if override_ignored is None:
            override_ignored = config.explicit_countables_override_ignore

        requested = set(as_names(countables)) if countables else set()
        if requested:
            to_count = [countable for countable in self.get_countables() if countable in requested]
        else:
            to_count = self.get_active_countables()

        for parameter in to_count:
            if self.is_countable_ignored(parameter) and not (requested and override_ignored):
                continue

            strategy = normalize_strategy(
                parameter,
                strategies.get(parameter),
                ParameterCounter,
                "count",
                self._count_parameter_fallback,
                self.counter_registry.kind,
            )

            query = self.get_countable_base_query(parameter)
            self.apply(query, exclude=parameter)

            counts.put(parameter, strategy(parameter, query, self))
            logger.debug(f"Counted countable '{parameter}' of {type(self).__name__}")

        logger.debug(f"Computed {len(counts)} alternative counts for {type(self).__name__}")
        return counts

    def _count_parameter_fallback(self, parameter: str, query: Any, filter: CountableFilter) -> Any:
        return self.count_parameter(parameter, query)

    def count_parameter(self, parameter: str, query: Any) -> Any:
        """
        Gets the count for a countable that has no strategy in :meth:`count_strategies`,
        given the filter settings for the other parameters.

        Override this if your filter shares one way of counting between its countables.

        :raises FilterParameterUnhandledError: Always, unless overridden
        """
        raise FilterParameterUnhandledError(f"No fallback strategy determined for countable parameter '{parameter}'")

    def ignore_countable(self, countable: str | Iterable[str]) -> CountableFilter:
        """
        Omits one or more countables from :meth:`get_counts`.

        Unlike :meth:`ignore_parameter`, this does not change what gets applied to the
        queries of the other countables.

        :return: Self for method chaining
        """
        self._ignored_countables.update(as_names(countable))
        return self

    def unignore_countable(self, countable: str | Iterable[str]) -> CountableFilter:
        """
        Re-enables one or more countables for :meth:`get_counts`.

        :return: Self for method chaining
        """
        self._ignored_countables.difference_update(as_names(countable))
        return self

    def is_countable_ignored(self, countable: str) -> bool:
        if not self._ignored_countables:
            return False
        return countable in self._ignored_countables

    @property
    def ignored_countables(self) -> set[str]:
        return self._ignored_countables.copy()


class MongoCountableFilter(CountableFilter):
    """Countable filter over a single MongoDB collection."""

    collection: ClassVar[Collection | None] = None

    def __init__(self, data: FilterData | Mapping[str, Any] | None = None, collection: Collection | None = None):
        """
        :param data: Filter values
        :param collection: Collection to query, overrides the class-level `collection`
        """
        super().__init__(data)
        self._collection = collection if collection is not None else self.collection

    def get_query(self) -> MongoQuery:
        """Fresh query over the whole collection."""
        if self._collection is None:
            raise ValueError(f"No collection set for {type(self).__name__}.")
        return MongoQuery(self._collection)

    def get_countable_base_query(self, parameter: str | None = None) -> MongoQuery:
        return self.get_query()

    def query(self) -> MongoQuery:
        """Fresh query with all filter parameters applied."""
        return self.apply(self.get_query())
