"""Query executors."""

from pgbgwriter.executor.duckdb_executor import DuckDBExecutor
from pgbgwriter.executor.postgres_executor import PostgresExecutor

__all__ = ["DuckDBExecutor", "PostgresExecutor"]
