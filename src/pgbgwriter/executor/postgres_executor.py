"""PostgreSQL query executor for pgbgwriter.

one connection per executor, opened lazily on first query and closed when
the request is done. no pooling and no retries - a failed query surfaces as
QueryExecutionError and the next request starts fresh.
"""

import logging
import time
from typing import Any

import psycopg2

from pgbgwriter.config import ConnectionSettings
from pgbgwriter.errors import QueryExecutionError
from pgbgwriter.models.query import QueryResult

logger = logging.getLogger(__name__)


class PostgresExecutor:
    """Execute read-only queries against a PostgreSQL server."""

    def __init__(self, settings: ConnectionSettings | None = None) -> None:
        self.settings = settings or ConnectionSettings()
        self._conn = None  # lazy init

    @property
    def conn(self):
        """Get or create the psycopg2 connection."""
        if self._conn is None:
            kwargs = self.settings.connect_kwargs()
            logger.debug(
                "connecting to PostgreSQL (host=%s, dbname=%s)",
                kwargs.get("host") or "<default>",
                kwargs.get("dbname") or "<default>",
            )
            try:
                self._conn = psycopg2.connect(self.settings.dsn, **kwargs)
            except psycopg2.Error as e:
                raise QueryExecutionError(f"Error connecting to PostgreSQL: {e}") from e
            # stats views only - never leave a transaction open on the server
            self._conn.autocommit = True
        return self._conn

    def execute(self, sql: str) -> QueryResult:
        """Execute SQL and return structured results."""
        start = time.perf_counter()

        try:
            with self.conn.cursor() as cursor:
                cursor.execute(sql)
                columns = [desc[0] for desc in cursor.description or []]
                rows = cursor.fetchall() if cursor.description else []
        except psycopg2.Error as e:
            raise QueryExecutionError(f"Error executing query: {e}", sql=sql) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("executed in %.2fms (%d rows): %s", elapsed_ms, len(rows), sql)

        data = [dict(zip(columns, row)) for row in rows]
        return QueryResult(
            sql=sql,
            columns=columns,
            data=data,
            row_count=len(data),
            execution_time_ms=round(elapsed_ms, 2),
        )

    def execute_raw(self, sql: str) -> list[tuple[Any, ...]]:
        """Execute SQL and return raw tuples."""
        try:
            with self.conn.cursor() as cursor:
                cursor.execute(sql)
                return cursor.fetchall()
        except psycopg2.Error as e:
            raise QueryExecutionError(f"Error executing query: {e}", sql=sql) from e

    def server_version_num(self) -> int:
        """Numeric server version, e.g. 160004 or 170002."""
        rows = self.execute_raw("SHOW server_version_num;")
        return int(rows[0][0])

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "PostgresExecutor":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
