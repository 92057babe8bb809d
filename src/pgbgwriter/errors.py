"""Error types for pgbgwriter.

library code raises these and lets them travel. only the agent handler and
the cli turn them into failure results / exit codes.
"""


class MetricError(Exception):
    """Base class for everything that can go wrong answering a metric request."""


class InvalidParameterError(MetricError, ValueError):
    """An action parameter outside the allowed set."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid action parameter: {value}")


class InvalidKeyError(MetricError, ValueError):
    """An item key that can't be parsed or isn't in the pg namespace."""


class QueryExecutionError(MetricError):
    """The database could not run the query."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        self.sql = sql
        super().__init__(message)


class EmptyResultError(MetricError):
    """The query ran but produced no usable value."""
