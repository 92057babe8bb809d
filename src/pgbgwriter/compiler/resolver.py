"""Metric resolver for background writer statistics.

turns a requested metric (plus an optional action) into the sql to run and
the type we expect back. four shapes of query:

  1. any column of the stats view, typed by its name prefix
  2. seconds since stats_reset
  3. average seconds between checkpoints
  4. fraction of time spent writing/syncing checkpoints

the only thing ever interpolated into the sql is either a fragment picked
from a closed table below or a column name rendered through sqlglot as an
identifier.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlglot import exp

from pgbgwriter.errors import InvalidParameterError, MetricError
from pgbgwriter.models.metric import MetricRequest, QuerySpec, ResultType
from pgbgwriter.parser.loader import FieldCatalog

logger = logging.getLogger(__name__)

# ordered (prefix, type) rules - first match wins, anything else is a count
TYPE_RULES: list[tuple[str, ResultType]] = [
    ("checkpoint_", ResultType.FLOAT),
    ("stats_reset", ResultType.STRING),
]
DEFAULT_TYPE = ResultType.INTEGER

# checkpoint counters moved out of pg_stat_bgwriter in PostgreSQL 17
CHECKPOINTER_MIN_VERSION = 170000

STATS_RESET_INTERVAL = "stats_reset_interval"
CHECKPOINT_AVG_INTERVAL = "checkpoint_avg_interval"
CHECKPOINT_TIME_RATIO = "checkpoint_time_ratio"

FIELD_SQL = "SELECT {column} FROM {view};"
RENAMED_FIELD_SQL = "SELECT {column} AS {alias} FROM {view};"

STATS_RESET_INTERVAL_SQL = "SELECT EXTRACT(EPOCH FROM NOW() - stats_reset) FROM {view};"

CHECKPOINT_AVG_INTERVAL_SQL = (
    "SELECT CASE {timed} + {req} WHEN 0 THEN 0 "
    "ELSE EXTRACT(EPOCH FROM (NOW() - stats_reset)) / ({timed} + {req}) END "
    "FROM {view};"
)

# NULLIF turns a zero elapsed time into NULL instead of a division error
CHECKPOINT_TIME_RATIO_SQL = (
    "SELECT ({counter} / 1000) / NULLIF(EXTRACT(EPOCH FROM NOW() - stats_reset), 0) "
    "FROM {view};"
)

# action -> counter expression. this table is the whole set of accepted actions
TIME_RATIO_COUNTERS = {
    "all": "({write_time} + {sync_time})",
    "write": "{write_time}",
    "sync": "{sync_time}",
}
DEFAULT_TIME_RATIO_ACTION = "all"


@dataclass(frozen=True)
class StatsLayout:
    """Where the checkpoint counters live on a given server version."""

    view: str
    checkpoints_timed: str
    checkpoints_req: str
    write_time: str
    sync_time: str


BGWRITER_LAYOUT = StatsLayout(
    view="pg_stat_bgwriter",
    checkpoints_timed="checkpoints_timed",
    checkpoints_req="checkpoints_req",
    write_time="checkpoint_write_time",
    sync_time="checkpoint_sync_time",
)

CHECKPOINTER_LAYOUT = StatsLayout(
    view="pg_stat_checkpointer",
    checkpoints_timed="num_timed",
    checkpoints_req="num_requested",
    write_time="write_time",
    sync_time="sync_time",
)


def classify_field(field_name: str) -> ResultType:
    """Pick the result type for a stats view column from its name."""
    for prefix, result_type in TYPE_RULES:
        if field_name.startswith(prefix):
            return result_type
    return DEFAULT_TYPE


def coerce_value(value, expected_type: ResultType) -> int | float | str | None:
    """Convert a raw column value to the declared result type.

    integers truncate toward zero, so an epoch of 3600.7 seconds reports as
    3600. None passes through untouched - the caller decides what a NULL
    means.
    """
    if value is None:
        return None

    try:
        if expected_type == ResultType.INTEGER:
            if isinstance(value, str):
                return int(Decimal(value))
            return int(value)
        if expected_type == ResultType.FLOAT:
            return float(value)
        return str(value)
    except (ArithmeticError, TypeError, ValueError) as e:
        raise MetricError(
            f"Cannot convert {value!r} to {expected_type.value}"
        ) from e


class MetricResolver:
    """Resolves metric requests to QuerySpecs.

    stateless apart from the server layout chosen at construction, so one
    resolver can be shared between threads. server_version_num of None
    means "assume the classic pg_stat_bgwriter layout".
    """

    def __init__(
        self,
        server_version_num: int | None = None,
        catalog: FieldCatalog | None = None,
    ) -> None:
        self.server_version_num = server_version_num
        if server_version_num is not None and server_version_num >= CHECKPOINTER_MIN_VERSION:
            self.layout = CHECKPOINTER_LAYOUT
            self._moved_columns = (catalog or FieldCatalog.load_default()).checkpointer_columns()
        else:
            self.layout = BGWRITER_LAYOUT
            self._moved_columns = {}

    def resolve(self, request: MetricRequest) -> QuerySpec:
        """Dispatch a request to the matching resolve_* operation."""
        name = request.metric_name
        if name == STATS_RESET_INTERVAL:
            spec = self.resolve_stats_reset_interval()
        elif name == CHECKPOINT_AVG_INTERVAL:
            spec = self.resolve_checkpoint_avg_interval()
        elif name == CHECKPOINT_TIME_RATIO:
            spec = self.resolve_checkpoint_time_ratio(request.sub_parameter)
        else:
            spec = self.resolve_field_metric(name)

        logger.debug("resolved %s -> %s (%s)", name, spec.sql_text, spec.expected_type.value)
        return spec

    def resolve_field_metric(self, field_name: str) -> QuerySpec:
        """Query a single column of the stats view.

        the name isn't checked against the view - a bad column is the
        server's problem and comes back as an execution error.
        """
        column = _identifier(field_name)
        moved = self._moved_columns.get(field_name)
        if moved:
            sql = RENAMED_FIELD_SQL.format(
                column=_identifier(moved), alias=column, view=CHECKPOINTER_LAYOUT.view
            )
        else:
            sql = FIELD_SQL.format(column=column, view=BGWRITER_LAYOUT.view)

        return QuerySpec(sql_text=sql, expected_type=classify_field(field_name))

    def resolve_stats_reset_interval(self) -> QuerySpec:
        """Seconds elapsed since the statistics were last reset."""
        return QuerySpec(
            sql_text=STATS_RESET_INTERVAL_SQL.format(view=self.layout.view),
            expected_type=ResultType.INTEGER,
        )

    def resolve_checkpoint_avg_interval(self) -> QuerySpec:
        """Average seconds between checkpoints since the last reset.

        0 when no checkpoints have run yet.
        """
        layout = self.layout
        return QuerySpec(
            sql_text=CHECKPOINT_AVG_INTERVAL_SQL.format(
                timed=layout.checkpoints_timed,
                req=layout.checkpoints_req,
                view=layout.view,
            ),
            expected_type=ResultType.FLOAT,
        )

    def resolve_checkpoint_time_ratio(self, action: str | None = None) -> QuerySpec:
        """Fraction of elapsed time spent in checkpoint write and/or sync.

        action is "all" (default, also used for None/empty), "write" or
        "sync". anything else raises InvalidParameterError before any sql
        is built.
        """
        key = action or DEFAULT_TIME_RATIO_ACTION
        if key not in TIME_RATIO_COUNTERS:
            raise InvalidParameterError(action)

        layout = self.layout
        counter = TIME_RATIO_COUNTERS[key].format(
            write_time=layout.write_time, sync_time=layout.sync_time
        )
        return QuerySpec(
            sql_text=CHECKPOINT_TIME_RATIO_SQL.format(counter=counter, view=layout.view),
            expected_type=ResultType.FLOAT,
        )


def _identifier(name: str) -> str:
    # plain names come out as-is, anything odd gets double quoted
    return exp.to_identifier(name).sql(dialect="postgres")
