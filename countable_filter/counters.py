from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .strategies import StrategyRegistry

if TYPE_CHECKING:
    from .countable import CountableFilter


class ParameterCounter(ABC):
    """Strategy that computes the alternative count for one countable parameter."""

    @abstractmethod
    def count(self, parameter: str, query: Any, filter: CountableFilter) -> Any:
        """
        Computes the count for `parameter`.

        :param parameter: Name of the countable parameter
        :param query: Query with every other active filter parameter applied
        :param filter: Filter the count is computed for
        :return: Count result, typically a number or a mapping from values to numbers
        """
        raise NotImplementedError


counter_registry = StrategyRegistry("counting")


@counter_registry.register("documents")
class DocumentCounter(ParameterCounter):
    """Counts the documents matching the query."""

    def count(self, parameter: str, query: Any, filter: CountableFilter) -> int:
        return query.count()

    def __repr__(self) -> str:
        return "DocumentCounter()"


@counter_registry.register("distinct")
class DistinctValueCounter(ParameterCounter):
    """Counts matching documents per distinct value of a field.

    This is the classic facet: for a `brand` countable it yields the number of matches
    of every brand, given the selection of all the other parameters.
    """

    def __init__(self, field: str | None = None, unwind: bool = False):
        """
        :param field: Database field to group by. Defaults to the name of the counted parameter.
        :param unwind: Whether the field holds arrays whose items are counted separately.
        """
        self.field = field
        self.unwind = unwind

    def count(self, parameter: str, query: Any, filter: CountableFilter) -> dict[Any, int]:
        return query.count_by(self.field or parameter, unwind=self.unwind)

    def __repr__(self) -> str:
        return f"DistinctValueCounter(field={self.field!r}, unwind={self.unwind!r})"
