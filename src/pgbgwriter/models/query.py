"""Pydantic models for executed queries and agent requests/results.

QueryResult is what an executor hands back. AgentRequest/AgentResult are
the shapes on the monitoring agent side of the fence.
"""

from typing import Self

from pydantic import BaseModel, Field

from pgbgwriter.models.metric import ResultType

# item keys look like "pg.<metric>" - everything after these 3 chars is the metric
KEY_PREFIX = "pg."


class QueryResult(BaseModel):
    """Result of an executed query.

    returning the sql alongside data is handy when an item goes unsupported
    and you want to see what was actually sent to the server.
    """

    sql: str
    columns: list[str]
    data: list[dict]
    row_count: int
    execution_time_ms: float

    def first_value(self):
        """First column of the first row, or None if there are no rows."""
        if not self.data or not self.columns:
            return None
        return self.data[0].get(self.columns[0])


class AgentRequest(BaseModel):
    """A parsed item key: "pg.checkpoint_time_ratio[conn,db,write]".

    params are positional - 0 is the connection string, 1 the database and
    2 the action for keys that take one.
    """

    key: str
    params: list[str] = Field(default_factory=list)

    @property
    def metric_name(self) -> str:
        return self.key[len(KEY_PREFIX):]

    def param(self, index: int) -> str | None:
        """Get a positional parameter, treating missing and empty the same."""
        if index >= len(self.params):
            return None
        return self.params[index] or None


class AgentResult(BaseModel):
    """What goes back to the agent: a typed value or an error message."""

    ok: bool
    value: int | float | str | None = None
    result_type: ResultType | None = None
    message: str | None = None
    sql: str | None = None  # what was sent to the server, when it got that far

    @classmethod
    def success(
        cls, value: int | float | str, result_type: ResultType, sql: str | None = None
    ) -> Self:
        return cls(ok=True, value=value, result_type=result_type, sql=sql)

    @classmethod
    def failure(cls, message: str, sql: str | None = None) -> Self:
        return cls(ok=False, message=message, sql=sql)
