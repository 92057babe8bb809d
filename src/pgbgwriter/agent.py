"""Agent-facing request handler.

this is the seam the monitoring agent talks to: it hands over an item key,
gets back an AgentResult. every request is independent - its own executor,
its own connection, closed before returning - so one broken item never
affects the next poll.
"""

import logging
from collections.abc import Callable

from pgbgwriter.compiler.resolver import CHECKPOINT_TIME_RATIO, MetricResolver
from pgbgwriter.config import ConnectionSettings
from pgbgwriter.errors import EmptyResultError, MetricError
from pgbgwriter.executor.postgres_executor import PostgresExecutor
from pgbgwriter.models.query import AgentRequest, AgentResult
from pgbgwriter.parser.keys import parse_key
from pgbgwriter.store import MetricStore

logger = logging.getLogger(__name__)

# positional key parameters
PARAM_CONNECTION = 0
PARAM_DATABASE = 1
PARAM_ACTION = 2


def log_error(message: str) -> None:
    """Default error reporter - just log it."""
    logger.warning(message)


class AgentHandler:
    """Answer item keys against a PostgreSQL server."""

    def __init__(
        self,
        settings: ConnectionSettings | None = None,
        executor_factory: Callable[[ConnectionSettings], object] = PostgresExecutor,
        report_error: Callable[[str], None] = log_error,
    ) -> None:
        self.settings = settings or ConnectionSettings()
        self.executor_factory = executor_factory
        self.report_error = report_error

    def handle(self, key: str) -> AgentResult:
        """Evaluate one item key. failures come back as ok=False, never raised."""
        try:
            request = parse_key(key)
            return self._collect(request)
        except MetricError as e:
            message = str(e)
            self.report_error(message)
            return AgentResult.failure(message, sql=getattr(e, "sql", None))

    def _collect(self, request: AgentRequest) -> AgentResult:
        action = self._action(request)
        if request.metric_name == CHECKPOINT_TIME_RATIO:
            # reject a bad action before touching the server
            MetricResolver().resolve_checkpoint_time_ratio(action)

        settings = self.settings.with_overrides(
            dsn=request.param(PARAM_CONNECTION),
            database=request.param(PARAM_DATABASE),
        )

        executor = self.executor_factory(settings)
        with MetricStore(executor, self._server_version(executor, settings)) as store:
            sql = store.get_sql(request.metric_name, action)
            result = store.collect(request.metric_name, action)

        if not result.present:
            raise EmptyResultError(f"No value returned for {request.key}")

        logger.debug("%s = %r", request.key, result.value)
        return AgentResult.success(result.value, result.result_type, sql=sql)

    def _action(self, request: AgentRequest) -> str | None:
        if request.metric_name != CHECKPOINT_TIME_RATIO:
            return None
        return request.param(PARAM_ACTION)

    def _server_version(self, executor, settings: ConnectionSettings) -> int | None:
        if not settings.detect_version:
            return None
        version_of = getattr(executor, "server_version_num", None)
        if version_of is None:
            return None
        try:
            return version_of()
        except MetricError:
            executor.close()
            raise
