from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

import mongomock
import pytest

from countable_filter.configuration import config
from countable_filter.countable import CountableFilter

PRODUCTS: list[dict[str, Any]] = [
    {"name": "Anvil", "brand": "acme", "color": "red", "price": 10, "tags": ["heavy", "metal"]},
    {"name": "Rocket", "brand": "acme", "color": "blue", "price": 20, "tags": ["fast"]},
    {"name": "Widget", "brand": "globex", "color": "red", "price": 10, "tags": ["metal"]},
    {"name": "Stapler", "brand": "initech", "color": "red", "price": 30, "tags": []},
    {"name": "Printer", "brand": "initech", "color": "black", "price": 30, "tags": ["heavy"]},
]


@pytest.fixture(autouse=True)
def reset_config():
    config.reset()
    yield
    config.reset()


@pytest.fixture
def products() -> mongomock.collection.Collection:
    collection = mongomock.MongoClient().shop.products
    collection.insert_many(copy.deepcopy(PRODUCTS))
    return collection


class FakeQuery:
    """In-memory query double that records which parameters were applied to it."""

    def __init__(self, records: list[dict[str, Any]], scope: str | None = None):
        self.records = records
        self.scope = scope
        self.applied: list[str] = []
        self._predicates: list[Callable[[dict[str, Any]], bool]] = []

    def where(self, parameter: str, predicate: Callable[[dict[str, Any]], bool]) -> FakeQuery:
        self.applied.append(parameter)
        self._predicates.append(predicate)
        return self

    def matching(self) -> list[dict[str, Any]]:
        return [r for r in self.records if all(predicate(r) for predicate in self._predicates)]

    def count(self) -> int:
        return len(self.matching())

    def count_by(self, field: str, unwind: bool = False) -> dict[Any, int]:
        counts: dict[Any, int] = {}
        for record in self.matching():
            counts[record[field]] = counts.get(record[field], 0) + 1
        return dict(sorted(counts.items()))


def match_in(parameter: str, value: Any, query: FakeQuery, filter: Any) -> None:
    values = value if isinstance(value, list) else [value]
    query.where(parameter, lambda record: record[parameter] in values)


class ProductFilter(CountableFilter):
    """Countable filter over `PRODUCTS` whose fallback counts the matching records."""

    defaults = {"brand": None, "color": None, "price": None}
    countables = ("brand", "color", "price")

    def __init__(self, data: Any = None, records: list[dict[str, Any]] | None = None):
        self.records = records if records is not None else PRODUCTS
        self.base_queries: list[FakeQuery] = []
        super().__init__(data)

    def strategies(self) -> dict[str, Any]:
        return {"brand": match_in, "color": match_in, "price": match_in}

    def get_countable_base_query(self, parameter: str | None = None) -> FakeQuery:
        query = FakeQuery(self.records, scope=parameter)
        self.base_queries.append(query)
        return query

    def count_parameter(self, parameter: str, query: Any) -> int:
        return query.count()


@pytest.fixture
def product_filter_class() -> type[ProductFilter]:
    return ProductFilter


@pytest.fixture
def product_records() -> list[dict[str, Any]]:
    return copy.deepcopy(PRODUCTS)


@pytest.fixture
def fake_query_class() -> type[FakeQuery]:
    return FakeQuery
