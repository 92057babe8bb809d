"""Pydantic models for pgbgwriter."""

from pgbgwriter.models.metric import (
    FieldDefinition,
    KeyDefinition,
    MetricRequest,
    MetricResult,
    QuerySpec,
    ResultType,
)
from pgbgwriter.models.query import AgentRequest, AgentResult, QueryResult

__all__ = [
    "AgentRequest",
    "AgentResult",
    "FieldDefinition",
    "KeyDefinition",
    "MetricRequest",
    "MetricResult",
    "QueryResult",
    "QuerySpec",
    "ResultType",
]
