"""Query resolution for background writer metrics."""

from pgbgwriter.compiler.resolver import MetricResolver, classify_field, coerce_value

__all__ = ["MetricResolver", "classify_field", "coerce_value"]
