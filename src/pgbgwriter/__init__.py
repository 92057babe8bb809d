"""pgbgwriter - PostgreSQL background writer metrics for monitoring agents."""

from pgbgwriter.agent import AgentHandler
from pgbgwriter.compiler.resolver import MetricResolver
from pgbgwriter.config import ConnectionSettings, load_settings
from pgbgwriter.executor.duckdb_executor import DuckDBExecutor
from pgbgwriter.executor.postgres_executor import PostgresExecutor
from pgbgwriter.store import MetricStore

__version__ = "0.1.0"

__all__ = [
    "AgentHandler",
    "ConnectionSettings",
    "DuckDBExecutor",
    "MetricResolver",
    "MetricStore",
    "PostgresExecutor",
    "load_settings",
]
