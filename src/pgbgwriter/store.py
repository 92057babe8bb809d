"""Main MetricStore interface for pgbgwriter."""

import logging

from pgbgwriter.compiler.resolver import MetricResolver, coerce_value
from pgbgwriter.errors import EmptyResultError
from pgbgwriter.models.metric import MetricRequest, MetricResult, QuerySpec
from pgbgwriter.parser.loader import FieldCatalog

logger = logging.getLogger(__name__)


class MetricStore:
    """Resolve, execute and coerce background writer metrics.

    the executor is anything with execute(sql) -> QueryResult and close().
    one store per request is the normal usage - it owns the executor and
    closes it on exit.
    """

    def __init__(
        self,
        executor,
        server_version_num: int | None = None,
        catalog: FieldCatalog | None = None,
    ) -> None:
        """Initialize the metric store.

        Args:
            executor: PostgresExecutor, DuckDBExecutor or anything shaped like them.
            server_version_num: Server version, or None for the pg_stat_bgwriter layout.
            catalog: Field catalog, defaults to the one shipped with the package.
        """
        self.executor = executor
        self.catalog = catalog or FieldCatalog.load_default()
        self.resolver = MetricResolver(server_version_num, catalog=self.catalog)

    def get_spec(self, metric_name: str, sub_parameter: str | None = None) -> QuerySpec:
        """Resolve a metric without executing it."""
        request = MetricRequest(metric_name=metric_name, sub_parameter=sub_parameter)
        return self.resolver.resolve(request)

    def get_sql(self, metric_name: str, sub_parameter: str | None = None) -> str:
        """Get the SQL without executing it."""
        return self.get_spec(metric_name, sub_parameter).sql_text

    def collect(self, metric_name: str, sub_parameter: str | None = None) -> MetricResult:
        """Run the metric query once and coerce the first column.

        no row (or a NULL) comes back as present=False. executor errors are
        not caught here.
        """
        spec = self.get_spec(metric_name, sub_parameter)
        result = self.executor.execute(spec.sql_text)

        raw = result.first_value()
        if raw is None:
            logger.debug("%s returned no value (%d rows)", metric_name, result.row_count)
            return MetricResult.missing(spec.expected_type)

        return MetricResult(
            value=coerce_value(raw, spec.expected_type),
            present=True,
            result_type=spec.expected_type,
        )

    def fetch(self, metric_name: str, sub_parameter: str | None = None) -> int | float | str:
        """Collect a metric and return the bare value.

        raises EmptyResultError when there's nothing to report.
        """
        result = self.collect(metric_name, sub_parameter)
        if not result.present:
            raise EmptyResultError(f"No value returned for {metric_name}")
        return result.value

    def list_fields(self) -> list[dict]:
        """List the stats view fields present on the server version, with result types."""
        return [
            {
                "name": f.name,
                "type": self.resolver.resolve_field_metric(f.name).expected_type.value,
                "description": f.description,
            }
            for f in self.catalog.available_fields(self.resolver.server_version_num)
        ]

    def list_keys(self) -> list[dict]:
        """List derived item keys."""
        return [
            {
                "key": k.key,
                "type": k.result_type.value,
                "params": k.params,
                "description": k.description,
            }
            for k in self.catalog.keys.values()
        ]

    def close(self) -> None:
        """Close the executor."""
        if self.executor is not None:
            self.executor.close()

    def __enter__(self) -> "MetricStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
