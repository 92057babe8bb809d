"""Pytest fixtures for pgbgwriter tests."""

from collections.abc import Generator
from datetime import datetime
from pathlib import Path

import pytest

from pgbgwriter.executor.duckdb_executor import DuckDBExecutor
from pgbgwriter.models.query import QueryResult


class FakeExecutor:
    """Stands in for a database: records every query, returns canned rows."""

    def __init__(self, rows=None, error=None, version=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.version = version
        self.queries: list[str] = []
        self.closed = False

    def execute(self, sql: str) -> QueryResult:
        self.queries.append(sql)
        if self.error is not None:
            raise self.error
        data = [{"value": row} for row in self.rows]
        return QueryResult(
            sql=sql,
            columns=["value"],
            data=data,
            row_count=len(data),
            execution_time_ms=0.0,
        )

    def close(self) -> None:
        self.closed = True


class VersionedFakeExecutor(FakeExecutor):
    """Fake executor that can also report a server version."""

    def server_version_num(self) -> int:
        return self.version


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def make_executor():
    """Factory for fake executors: make_executor(rows=[5], version=170002)."""

    def make(rows=None, error=None, version=None) -> FakeExecutor:
        if version is not None:
            return VersionedFakeExecutor(rows=rows, error=error, version=version)
        return FakeExecutor(rows=rows, error=error)

    return make


@pytest.fixture
def bgwriter_row() -> dict:
    """A pg_stat_bgwriter row as PostgreSQL 16 would report it."""
    return {
        "checkpoints_timed": 10,
        "checkpoints_req": 2,
        "checkpoint_write_time": 4000.0,
        "checkpoint_sync_time": 500.0,
        "buffers_checkpoint": 300,
        "buffers_clean": 50,
        "maxwritten_clean": 0,
        "buffers_backend": 20,
        "buffers_backend_fsync": 0,
        "buffers_alloc": 900,
        "stats_reset": datetime(2024, 1, 1, 0, 0, 0),
    }


@pytest.fixture
def snapshot_executor(bgwriter_row: dict) -> Generator[DuckDBExecutor, None, None]:
    """DuckDB executor holding one pg_stat_bgwriter row reset 1000s ago."""
    executor = DuckDBExecutor()
    executor.load_snapshot([bgwriter_row])
    executor.conn.execute(
        "UPDATE pg_stat_bgwriter SET stats_reset = CAST(NOW() AS TIMESTAMP) - INTERVAL 1000 SECOND"
    )

    yield executor
    executor.close()


@pytest.fixture
def snapshot_csv(tmp_path: Path) -> Path:
    """A pg_stat_bgwriter export like psql's \\copy ... CSV HEADER produces."""
    path = tmp_path / "bgwriter.csv"
    path.write_text(
        "checkpoints_timed,checkpoints_req,checkpoint_write_time,checkpoint_sync_time,"
        "buffers_checkpoint,buffers_clean,maxwritten_clean,buffers_backend,"
        "buffers_backend_fsync,buffers_alloc,stats_reset\n"
        "10,2,4000,500,300,50,0,20,0,900,2024-01-01 00:00:00+00\n"
    )
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "pgbw.yaml"
    path.write_text(
        """
dsn: "host=db1 user=monitor"
database: postgres
connect_timeout: 5
statement_timeout: 15000
"""
    )
    return path
