class FilterError(Exception):
    """Base class for errors raised while applying or counting a filter."""

    pass


class ParameterStrategyInvalidError(FilterError):
    """Raised when a declared strategy is neither an instance, a constructible type, a callable nor None.

    Always a configuration defect of the filter, never a problem with the filter data.
    """

    pass


class FilterParameterUnhandledError(FilterError):
    """Raised by the fallback handlers when a parameter has no strategy and the fallback was not overridden."""

    pass


class FilterDataValidationError(FilterError, ValueError):
    """Raised when raw filter input fails validation."""

    pass
