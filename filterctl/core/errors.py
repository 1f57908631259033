"""
Domain-specific exceptions for filterctl.

Nothing in the package logs its failures: every problem is raised as one of
these exceptions, with enough context in ``details`` (rule index, filter id,
clause path) for a caller to render an actionable diagnostic.
"""

from typing import Any


class FilterCtlError(Exception):
    """Base exception for all filterctl domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigError(FilterCtlError):
    """
    Raised when the declarative configuration is malformed.

    Examples:
    - Empty filter node
    - Multiple operators specified in the same node
    - 'isEscaped' used with a field that does not support it
    - Reference to a named filter that does not exist
    - Invalid or duplicated label names
    """

    pass


class CompilationError(FilterCtlError):
    """
    Raised when a rule cannot be turned into native filters.

    Examples:
    - Logical node without children
    - Criteria producing an empty native filter
    - Rule asking to mark messages as spam
    - Native filter that cannot be turned back into a rule
    """

    pass


class UnsupportedCriteriaError(FilterCtlError):
    """
    Raised when a criteria cannot be evaluated against a sample message.

    Examples:
    - Raw (already escaped) operands
    - Unconstrained 'query' leaves
    """

    pass


class ActionConflictError(FilterCtlError):
    """
    Raised when the actions of several matching rules disagree.

    Examples:
    - One rule marks as important, another never marks as important
    - Two different categories
    - Two different forward addresses
    """

    pass


class DiffValidationError(FilterCtlError):
    """
    Raised when a computed diff is not safe to apply.

    Examples:
    - Removing a label that is still used by a filter
    """

    pass


class MultiError(FilterCtlError):
    """Several independent errors collected by a batch operation."""

    def __init__(self, errors: list[Exception]):
        self.errors = list(errors)
        message = "\n".join(f"- {e}" for e in self.errors)
        super().__init__(
            f"{len(self.errors)} errors occurred:\n{message}",
            details={"count": len(self.errors)},
        )


def combine_errors(*errors: Exception | None) -> Exception | None:
    """
    Combine errors collected during a batch operation.

    ``None`` entries are ignored and nested ``MultiError`` instances are
    flattened.

    Returns:
        None if there was no error, the error itself if there was exactly
        one, a MultiError otherwise
    """
    flat: list[Exception] = []
    for err in errors:
        if err is None:
            continue
        if isinstance(err, MultiError):
            flat.extend(err.errors)
        else:
            flat.append(err)

    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return MultiError(flat)


def error_list(err: Exception | None) -> list[Exception]:
    """Return the individual errors contained in a (possibly combined) error."""
    if err is None:
        return []
    if isinstance(err, MultiError):
        return list(err.errors)
    return [err]
