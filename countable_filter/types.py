from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

if TYPE_CHECKING:
    from .counters import ParameterCounter
    from .parameters import ParameterFilter


class FilterOperator(str, Enum):
    """MongoDB query operators."""

    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    REGEX = "$regex"
    EXISTS = "$exists"


CountCallable = Callable[[str, Any, Any], Any]
"""Signature of a counting strategy: ``(parameter, query, filter) -> result``."""

ApplyCallable = Callable[[str, Any, Any, Any], Any]
"""Signature of an application strategy: ``(parameter, value, query, filter) -> None``."""

CountStrategy = Union["ParameterCounter", type, str, CountCallable, None]
ApplyStrategy = Union["ParameterFilter", type, str, ApplyCallable, None]
