from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from .exceptions import FilterDataValidationError
from .query import ValueValidationError, validate_filter_value

EMPTY_SENTINEL = "__all__"
"""Value a client sends to explicitly select everything for a parameter."""


def is_applicable_value(value: Any) -> bool:
    """Whether `value` represents an actual selection.

    None, blank strings, the "__all__" sentinel and empty lists do not restrict anything.
    """
    if value is None:
        return False
    if isinstance(value, str) and (not value.strip() or value == EMPTY_SENTINEL):
        return False
    if isinstance(value, (list, tuple)) and not value:
        return False
    return True


class FilterData:
    """
    Validated filter input: the values of the filter parameters, with defaults filled in.

    If `defaults` are given, they also declare which parameters are known; anything else in the
    raw input is dropped. Without defaults, every key of the raw input is kept.
    """

    def __init__(self, attributes: Mapping[str, Any] | None = None, defaults: Mapping[str, Any] | None = None):
        self._defaults: dict[str, Any] = dict(defaults or {})
        attributes = dict(attributes or {})

        if self._defaults:
            unknown = set(attributes) - set(self._defaults)
            attributes = {k: v for k, v in attributes.items() if k not in unknown}
            merged = {key: copy.deepcopy(default) for key, default in self._defaults.items()}
            merged.update(attributes)
            attributes = merged

        self._attributes: dict[str, Any] = self._validate(attributes)

    @staticmethod
    def _validate(attributes: dict[str, Any]) -> dict[str, Any]:
        validated = {}
        for key, value in attributes.items():
            if not isinstance(key, str) or not key:
                raise FilterDataValidationError(f"Filter parameter names must be non-empty strings, got {key!r}")
            try:
                validated[key] = validate_filter_value(value)
            except ValueValidationError as e:
                raise FilterDataValidationError(f"Invalid value for filter parameter '{key}': {e}") from e
        return validated

    @property
    def defaults(self) -> dict[str, Any]:
        return self._defaults.copy()

    def get_attributes(self) -> dict[str, Any]:
        return self._attributes.copy()

    def get_applicable_attributes(self) -> dict[str, Any]:
        """Parameters whose value restricts the query, in input order."""
        return {k: v for k, v in self._attributes.items() if is_applicable_value(v)}

    def get_parameter_value(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def has_parameter(self, name: str) -> bool:
        return name in self._attributes

    def __repr__(self) -> str:
        return f"FilterData({self._attributes!r})"
