from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any


class CountableResults(Mapping[str, Any]):
    """Ordered mapping from countable parameter name to its count result.

    Filled with :meth:`put` while counting; callers only read from it.
    The iteration order is the order in which the countables were counted.
    """

    def __init__(self, items: Mapping[str, Any] | None = None) -> None:
        self._items: dict[str, Any] = dict(items or {})

    def put(self, parameter: str, value: Any) -> CountableResults:
        """Stores `value` for `parameter`, replacing any previous value.

        :return: Self for method chaining
        """
        self._items[parameter] = value
        return self

    def __getitem__(self, parameter: str) -> Any:
        return self._items[parameter]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def map(self, func: Callable[[Any, str], Any]) -> CountableResults:
        """New results with `func(value, parameter)` applied to every value."""
        return CountableResults({parameter: func(value, parameter) for parameter, value in self._items.items()})

    def filter(self, func: Callable[[Any, str], bool]) -> CountableResults:
        """New results with only the entries for which `func(value, parameter)` is true."""
        return CountableResults({parameter: value for parameter, value in self._items.items() if func(value, parameter)})

    def to_dict(self) -> dict[str, Any]:
        return self._items.copy()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CountableResults):
            return list(self._items.items()) == list(other._items.items())
        return super().__eq__(other)

    def __repr__(self) -> str:
        return f"CountableResults({self._items!r})"
