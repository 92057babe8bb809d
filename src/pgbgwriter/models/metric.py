"""Pydantic models for metric requests, query specs and results.

everything here is request-scoped - built for one call, used once, thrown away.
"""

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultType(str, Enum):
    """How the single returned column should be interpreted."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


class MetricRequest(BaseModel):
    """A request for one metric.

    metric_name is what's left of the item key after the "pg." prefix, e.g.
    "checkpoints_timed" or "checkpoint_time_ratio". sub_parameter is the
    optional qualifier (only the time ratio uses it today).
    """

    metric_name: str
    sub_parameter: str | None = None

    @field_validator("metric_name")
    @classmethod
    def metric_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("metric_name must not be empty")
        return value


class QuerySpec(BaseModel):
    """The sql to run for a request plus the type we expect back."""

    model_config = ConfigDict(frozen=True)

    sql_text: str
    expected_type: ResultType


class MetricResult(BaseModel):
    """Outcome of a collected metric.

    present=False means the query returned no row (or NULL) - that's not the
    same thing as the query failing, which raises instead.
    """

    value: int | float | str | None = None
    present: bool = True
    result_type: ResultType

    @classmethod
    def missing(cls, result_type: ResultType) -> Self:
        return cls(value=None, present=False, result_type=result_type)


class FieldDefinition(BaseModel):
    """A column of the background writer statistics view.

    checkpointer_column is set for counters that moved to pg_stat_checkpointer
    in PostgreSQL 17. removed_in is the server_version_num where the column
    went away for good.
    """

    name: str
    description: str | None = None
    checkpointer_column: str | None = None
    removed_in: int | None = None


class KeyDefinition(BaseModel):
    """A derived item key with its own query (not a plain column)."""

    key: str
    description: str | None = None
    result_type: ResultType
    params: list[str] = Field(default_factory=list)
