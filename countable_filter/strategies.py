"""Resolution of per-parameter strategy declarations into invocable strategies.

A strategy may be declared as an instance of the strategy class, as a class to instantiate,
as an identifier registered in a :class:`StrategyRegistry`, as a plain callable, or as None
(meaning: let the filter's fallback handle it). Classes and identifiers are instantiated once,
in place, and the declared mapping keeps the instance from then on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, MutableMapping
from typing import Any

from .exceptions import ParameterStrategyInvalidError
from .types import ApplyCallable, ApplyStrategy, CountCallable, CountStrategy

logger = logging.getLogger(__name__)

StrategyFactory = Callable[[], Any]


class StrategyRegistry:
    """Registry of zero-argument strategy constructors, keyed by identifier.

    Identifiers stand in for type references in strategy declarations, so that a filter
    configuration can say ``"distinct"`` instead of importing the class.
    """

    def __init__(self, kind: str) -> None:
        """
        :param kind: Human readable name of the strategies held, used in error messages
        """
        self.kind = kind
        self._factories: dict[str, StrategyFactory] = {}

    def register(self, identifier: str, factory: StrategyFactory | None = None) -> Any:
        """Registers a factory under `identifier`. Usable as a class decorator when `factory` is omitted.

        :raises ValueError: If a factory with the same identifier is already registered.
        """
        if factory is None:

            def decorator(cls: StrategyFactory) -> StrategyFactory:
                self.register(identifier, cls)
                return cls

            return decorator

        if identifier in self._factories:
            raise ValueError(f"{self.kind.capitalize()} strategy with identifier '{identifier}' is already registered.")
        self._factories[identifier] = factory
        return factory

    def unregister(self, identifier: str) -> None:
        self._factories.pop(identifier, None)

    def get(self, identifier: str) -> StrategyFactory | None:
        return self._factories.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)


def _instantiate(reference: str | type, capability: type, registry: StrategyRegistry) -> Any:
    if isinstance(reference, str):
        factory = registry.get(reference)
        if factory is None:
            raise ParameterStrategyInvalidError(
                f"Unknown {registry.kind} strategy identifier '{reference}'. Registered: {', '.join(registry) or 'none'}"
            )
        label = reference
    else:
        factory = reference
        label = reference.__qualname__

    try:
        strategy = factory()
    except Exception as e:
        raise ParameterStrategyInvalidError(
            f"Exception thrown while trying to instantiate {registry.kind} strategy '{label}'"
        ) from e

    if not isinstance(strategy, capability):
        raise ParameterStrategyInvalidError(
            f"Instantiated {registry.kind} strategy '{label}' is not a {capability.__name__}: '{type(strategy).__qualname__}'"
        )

    return strategy


def resolve_strategies(
    declared: MutableMapping[str, Any], capability: type, registry: StrategyRegistry
) -> MutableMapping[str, Any]:
    """Instantiates all class and identifier declarations of `declared`, in place.

    Other declarations are left as they are; whether they are usable is only checked
    by :func:`normalize_strategy` when the strategy is about to be used.

    :param declared: Mapping from parameter name to strategy declaration
    :param capability: Class the instantiated strategies must be instances of
    :param registry: Registry to look identifiers up in
    :return: The same mapping, resolved
    :raises ParameterStrategyInvalidError: If a declaration cannot be instantiated or is of the wrong type
    """
    for parameter, strategy in declared.items():
        if isinstance(strategy, (str, type)):
            declared[parameter] = _instantiate(strategy, capability, registry)
            logger.debug(f"Resolved {registry.kind} strategy for parameter '{parameter}' to {declared[parameter]!r}")
    return declared


def normalize_strategy(
    parameter: str,
    strategy: CountStrategy | ApplyStrategy,
    capability: type,
    method_name: str,
    fallback: CountCallable | ApplyCallable,
    kind: str,
) -> CountCallable | ApplyCallable:
    """Turns a resolved strategy declaration into something that can be called directly.

    :param parameter: Name of the parameter the strategy belongs to
    :param strategy: Resolved declaration
    :param capability: Strategy class whose instances are called through `method_name`
    :param method_name: Name of the method to call on `capability` instances
    :param fallback: Callable used for None declarations
    :param kind: Human readable name of the strategies, used in error messages
    :raises ParameterStrategyInvalidError: If the declaration is not usable
    """
    if isinstance(strategy, capability):
        return getattr(strategy, method_name)

    if strategy is None:
        return fallback

    if callable(strategy) and not isinstance(strategy, type):
        return strategy

    raise ParameterStrategyInvalidError(
        f"Invalid {kind} strategy defined for parameter '{parameter}',"
        f" must be {capability.__name__}, class, registered identifier, callable or None"
    )
