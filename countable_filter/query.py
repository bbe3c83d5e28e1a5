from __future__ import annotations

import copy
from typing import Any

from pymongo.collection import Collection

from .configuration import config
from .types import FilterOperator


class FieldValidationError(ValueError):
    """Raised when a field name fails validation."""

    pass


class ValueValidationError(ValueError):
    """Raised when a filter value fails validation."""

    pass


def validate_field_name(field: str) -> str:
    """Validate a database field name before it is put into a query.

    :param field: Field name to validate
    :return: Validated field name
    :raises FieldValidationError: If field name is empty, not a string or an operator
    """
    if not field:
        raise FieldValidationError("Field name cannot be empty")

    if not isinstance(field, str):
        raise FieldValidationError(f"Field name must be a string, got {type(field).__name__}")

    if field.startswith("$"):
        raise FieldValidationError(f"Field '{field}' cannot start with '$' (MongoDB operator prefix)")

    return field


def sanitize_string_value(value: str) -> str:
    """Sanitize a string value for use in queries.

    :param value: String value to sanitize
    :return: Sanitized string value
    :raises ValueValidationError: If value exceeds limits or contains dangerous patterns
    """
    if len(value) > config.max_string_value_length:
        raise ValueValidationError(f"String value exceeds maximum length of {config.max_string_value_length}")

    if value.startswith("$"):
        raise ValueValidationError("String values cannot start with '$' (MongoDB operator prefix)")

    return value


def validate_filter_value(value: Any) -> Any:
    """Validate and sanitize a filter value.

    Allow other primitive types (int, float, bool, datetime) as-is, but
    recursively validate arrays and sanitize strings.

    :param value: Value to validate
    :return: Validated value
    :raises ValueValidationError: If value is invalid
    """
    if value is None:
        return None

    if isinstance(value, str):
        return sanitize_string_value(value)

    if isinstance(value, (list, tuple)):
        if len(value) > config.max_array_length:
            raise ValueValidationError(f"Array value exceeds maximum length of {config.max_array_length}")
        return [validate_filter_value(v) for v in value]

    if isinstance(value, dict):
        raise ValueValidationError("Dictionary values are not allowed in filters (potential operator injection)")

    return value


def build_query_fragment(field: str, operator: FilterOperator, value: Any) -> dict[str, Any]:
    """Build MongoDB query fragment for a single field predicate.

    :param field: Database field the predicate targets
    :param operator: MongoDB operator for the predicate
    :param value: Already validated value
    :return: MongoDB query fragment
    :raises FieldValidationError: If the field name is invalid
    """
    validate_field_name(field)

    if operator == FilterOperator.EQ:
        return {field: value}
    elif operator == FilterOperator.REGEX:
        return {field: {FilterOperator.REGEX.value: value, "$options": "i"}}
    elif operator in (FilterOperator.IN, FilterOperator.NIN):
        array_value = list(value) if isinstance(value, (list, tuple)) else [value]
        return {field: {operator.value: array_value}}
    elif operator == FilterOperator.EXISTS:
        return {field: {operator.value: bool(value)}}
    else:
        return {field: {operator.value: value}}


class MongoQuery:
    """Query handle over a MongoDB collection.

    Predicates are collected as query fragments, the same way the fragments of a
    query builder are, and combined with ``$and`` only when the query is executed.
    A fresh instance carries no predicates, so every counting pass can start from one.
    """

    def __init__(self, collection: Collection):
        """
        :param collection: Collection the query runs against
        """
        self.collection = collection
        self._fragments: list[dict[str, Any]] = []

    def where(self, fragment: dict[str, Any]) -> MongoQuery:
        """Add a raw query fragment.

        :param fragment: MongoDB query fragment
        :return: Self for method chaining
        """
        if fragment:
            self._fragments.append(fragment)
        return self

    def where_field(self, field: str, operator: FilterOperator, value: Any) -> MongoQuery:
        """Add a predicate on a single field.

        :return: Self for method chaining
        """
        return self.where(build_query_fragment(field, operator, value))

    @property
    def fragments(self) -> list[dict[str, Any]]:
        return self._fragments.copy()

    def build(self) -> dict[str, Any]:
        """Build the final MongoDB query.

        Combines all query fragments using $and operator when multiple
        fragments exist. Returns empty dict if no predicates were added.
        The result is a copy; changing it leaves the query as it is.

        :return: MongoDB query dictionary
        """
        if not self._fragments:
            return {}

        if len(self._fragments) == 1:
            return copy.deepcopy(self._fragments[0])

        return {"$and": copy.deepcopy(self._fragments)}

    def count(self) -> int:
        """Number of documents matching the query."""
        return self.collection.count_documents(self.build())

    def find(self, projection: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        return list(self.collection.find(self.build(), projection))

    def aggregate(self, stages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Run an aggregation pipeline on the documents matching the query.

        :param stages: Pipeline stages appended after the ``$match`` stage
        :return: Resulting documents
        """
        pipeline: list[dict[str, Any]] = []
        match_query = self.build()
        if match_query:
            pipeline.append({"$match": match_query})
        pipeline.extend(stages)
        return list(self.collection.aggregate(pipeline))

    def count_by(self, field: str, unwind: bool = False) -> dict[Any, int]:
        """Count matching documents per distinct value of `field`.

        :param field: Field to group by
        :param unwind: Whether to unwind array values, so that each item is counted separately
        :return: Dictionary mapping values to number of matching documents, ordered by value
        """
        validate_field_name(field)

        stages: list[dict[str, Any]] = []
        if unwind:
            stages.append({"$unwind": f"${field}"})
        stages.append({"$group": {"_id": f"${field}", "count": {"$sum": 1}}})
        stages.append({"$sort": {"_id": 1}})

        return {doc["_id"]: doc["count"] for doc in self.aggregate(stages)}

    def copy(self) -> MongoQuery:
        """Copy of the query that shares the collection but not the predicates."""
        other = MongoQuery(self.collection)
        other._fragments = copy.deepcopy(self._fragments)
        return other

    def __repr__(self) -> str:
        return f"MongoQuery({self.collection.name!r}, {self.build()!r})"
