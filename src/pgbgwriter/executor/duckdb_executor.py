"""DuckDB executor for captured stats snapshots.

lets you evaluate the exact same metric sql without a live server: dump
pg_stat_bgwriter to csv (\\copy (SELECT * FROM pg_stat_bgwriter) TO ... CSV
HEADER), load it here and query away. duckdb speaks enough postgres
(NOW(), EXTRACT(EPOCH ...), CASE, NULLIF) for every query the resolver
builds.
"""

import logging
import time
from pathlib import Path
from typing import Any

import duckdb

from pgbgwriter.errors import QueryExecutionError
from pgbgwriter.models.query import QueryResult

logger = logging.getLogger(__name__)

SNAPSHOT_TABLE = "pg_stat_bgwriter"


class DuckDBExecutor:
    """Execute queries against DuckDB.

    same execute() contract as PostgresExecutor so the store doesn't care
    which one it gets.
    """

    def __init__(self, database_path: str | None = None) -> None:
        """Initialize DuckDB connection.

        Args:
            database_path: Path to DuckDB file, or None for in-memory.
        """
        self.database_path = database_path
        self._conn: duckdb.DuckDBPyConnection | None = None  # lazy init

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get or create the DuckDB connection."""
        if self._conn is None:
            self._conn = duckdb.connect(self.database_path or ":memory:")
        return self._conn

    def execute(self, sql: str) -> QueryResult:
        """Execute SQL and return structured results."""
        start = time.perf_counter()

        try:
            result = self.conn.execute(sql)
            columns = [desc[0] for desc in result.description or []]
            rows = result.fetchall() if result.description else []
        except duckdb.Error as e:
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

    def load_snapshot_csv(self, path: str | Path, table_name: str = SNAPSHOT_TABLE) -> None:
        """Load a stats view export as a table.

        read_csv_auto sniffs the column types. stats_reset is cast to a plain
        TIMESTAMP (offsets in the export are folded into UTC) so that
        NOW() - stats_reset is interval arithmetic.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {path}")

        source = str(path).replace("'", "''")
        try:
            self.conn.execute(f"""
                CREATE OR REPLACE TABLE {table_name} AS
                SELECT * REPLACE (CAST(stats_reset AS TIMESTAMP) AS stats_reset)
                FROM read_csv_auto('{source}', header = true)
            """)
        except duckdb.Error as e:
            raise QueryExecutionError(f"Error loading snapshot: {e}") from e
        logger.debug("loaded snapshot %s into %s", path, table_name)

    def load_snapshot(
        self, rows: list[dict[str, Any]], table_name: str = SNAPSHOT_TABLE
    ) -> None:
        """Create the snapshot table from in-memory rows (all with the same keys)."""
        if not rows:
            raise ValueError("Cannot create snapshot from empty data")

        columns = list(rows[0])
        placeholders = ", ".join(["?"] * len(columns))
        col_defs = ", ".join(
            f"{c} TIMESTAMP" if c == "stats_reset" else f"{c} DOUBLE" for c in columns
        )

        try:
            self.conn.execute(f"CREATE OR REPLACE TABLE {table_name} ({col_defs})")
            self.conn.executemany(
                f"INSERT INTO {table_name} VALUES ({placeholders})",
                [[row[c] for c in columns] for row in rows],
            )
        except duckdb.Error as e:
            raise QueryExecutionError(f"Error loading snapshot: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "DuckDBExecutor":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
