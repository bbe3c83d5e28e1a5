from __future__ import annotations

from typing import Any, get_args, get_type_hints

import pytest

from countable_filter.countable import CountableFilter
from countable_filter.counters import DistinctValueCounter, DocumentCounter, ParameterCounter, counter_registry
from countable_filter.declarative import DeclarativeFilter
from countable_filter.exceptions import ParameterStrategyInvalidError
from countable_filter.filter import Filter
from countable_filter.parameters import ParameterFilter
from countable_filter.strategies import StrategyRegistry, normalize_strategy, resolve_strategies


class Counter(ParameterCounter):
    def count(self, parameter: str, query: Any, filter: Any) -> str:
        return f"counted {parameter}"


def fallback(parameter: str, query: Any, filter: Any) -> str:
    return f"fallback {parameter}"


@pytest.fixture
def registry() -> StrategyRegistry:
    registry = StrategyRegistry("counting")
    registry.register("counter", Counter)
    return registry


class TestStrategyRegistry:
    def test_register_and_get(self, registry: StrategyRegistry) -> None:
        assert registry.get("counter") is Counter
        assert "counter" in registry
        assert list(registry) == ["counter"]
        assert len(registry) == 1

    def test_get_unknown_returns_none(self, registry: StrategyRegistry) -> None:
        assert registry.get("unknown") is None
        assert "unknown" not in registry

    def test_duplicate_identifier_raises(self, registry: StrategyRegistry) -> None:
        with pytest.raises(ValueError, match="already registered"):
            registry.register("counter", DocumentCounter)

    def test_register_as_decorator(self, registry: StrategyRegistry) -> None:
        @registry.register("decorated")
        class Decorated(Counter):
            pass

        assert registry.get("decorated") is Decorated

    def test_unregister(self, registry: StrategyRegistry) -> None:
        registry.unregister("counter")
        registry.unregister("never-registered")

        assert "counter" not in registry

    def test_default_counter_registry(self) -> None:
        assert counter_registry.get("documents") is DocumentCounter
        assert counter_registry.get("distinct") is DistinctValueCounter


class TestResolveStrategies:
    def test_identifiers_and_classes_are_instantiated_in_place(self, registry: StrategyRegistry) -> None:
        declared: dict[str, Any] = {"a": "counter", "b": Counter}

        resolved = resolve_strategies(declared, ParameterCounter, registry)

        assert resolved is declared
        assert isinstance(declared["a"], Counter)
        assert isinstance(declared["b"], Counter)

    def test_resolution_is_idempotent(self, registry: StrategyRegistry) -> None:
        declared: dict[str, Any] = {"a": "counter"}

        resolve_strategies(declared, ParameterCounter, registry)
        instance = declared["a"]
        resolve_strategies(declared, ParameterCounter, registry)

        assert declared["a"] is instance

    def test_other_declarations_are_left_alone(self, registry: StrategyRegistry) -> None:
        counter = Counter()
        declared: dict[str, Any] = {"instance": counter, "callable": fallback, "none": None, "invalid": 5}

        resolve_strategies(declared, ParameterCounter, registry)

        assert declared == {"instance": counter, "callable": fallback, "none": None, "invalid": 5}

    def test_unknown_identifier(self, registry: StrategyRegistry) -> None:
        with pytest.raises(ParameterStrategyInvalidError, match="Unknown counting strategy identifier 'missing'"):
            resolve_strategies({"a": "missing"}, ParameterCounter, registry)

    def test_factory_returning_wrong_type(self, registry: StrategyRegistry) -> None:
        registry.register("wrong", dict)

        with pytest.raises(ParameterStrategyInvalidError, match="is not a ParameterCounter: 'dict'"):
            resolve_strategies({"a": "wrong"}, ParameterCounter, registry)

    def test_constructor_requiring_arguments(self, registry: StrategyRegistry) -> None:
        class NeedsArgument(Counter):
            def __init__(self, field: str) -> None:
                self.field = field

        with pytest.raises(ParameterStrategyInvalidError) as excinfo:
            resolve_strategies({"a": NeedsArgument}, ParameterCounter, registry)
        assert isinstance(excinfo.value.__cause__, TypeError)

    def test_abstract_class_cannot_be_instantiated(self, registry: StrategyRegistry) -> None:
        with pytest.raises(ParameterStrategyInvalidError, match="ParameterCounter"):
            resolve_strategies({"a": ParameterCounter}, ParameterCounter, registry)


class TestNormalizeStrategy:
    def test_instance_is_called_through_method(self) -> None:
        strategy = normalize_strategy("brand", Counter(), ParameterCounter, "count", fallback, "counting")

        assert strategy("brand", None, None) == "counted brand"

    def test_none_uses_fallback(self) -> None:
        strategy = normalize_strategy("brand", None, ParameterCounter, "count", fallback, "counting")

        assert strategy is fallback

    def test_callable_is_used_as_is(self) -> None:
        def custom(parameter: str, query: Any, filter: Any) -> int:
            return 42

        assert normalize_strategy("brand", custom, ParameterCounter, "count", fallback, "counting") is custom

    @pytest.mark.parametrize("strategy", [5, 1.5, ["documents"], object(), Counter])
    def test_unusable_declarations_raise(self, strategy: Any) -> None:
        with pytest.raises(ParameterStrategyInvalidError, match="parameter 'brand'"):
            normalize_strategy("brand", strategy, ParameterCounter, "count", fallback, "counting")


STRATEGY_CLASSES = {"ParameterCounter": ParameterCounter, "ParameterFilter": ParameterFilter}


def declared_strategy_types(method: Any) -> tuple[Any, ...]:
    mapping = get_type_hints(method, localns=STRATEGY_CLASSES)["return"]
    return get_args(get_args(mapping)[1])


class TestStrategyAnnotations:
    @pytest.mark.parametrize(
        "method",
        [CountableFilter.count_strategies, CountableFilter.build_countable_strategies, DeclarativeFilter.count_strategies],
    )
    def test_counting_strategy_maps(self, method: Any) -> None:
        kinds = declared_strategy_types(method)

        assert ParameterCounter in kinds
        assert str in kinds
        assert type(None) in kinds

    @pytest.mark.parametrize("method", [Filter.strategies, Filter.build_strategies, DeclarativeFilter.strategies])
    def test_application_strategy_maps(self, method: Any) -> None:
        kinds = declared_strategy_types(method)

        assert ParameterFilter in kinds
        assert str in kinds
        assert type(None) in kinds
