"""Prometheus metrics for tabdb."""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)


class MetricsRegistry:
    """Registry of all tabdb metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or REGISTRY

        # Command metrics
        self.commands_total = Counter(
            "tabdb_commands_total",
            "Total number of commands handled",
            ["statement", "status"],  # status: ok, error
            registry=self._registry,
        )

        self.command_latency_seconds = Histogram(
            "tabdb_command_latency_seconds",
            "Command latency in seconds",
            ["statement"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self._registry,
        )

        # Storage metrics
        self.table_persists_total = Counter(
            "tabdb_table_persists_total",
            "Total table writes",
            ["mode"],  # rewrite, append
            registry=self._registry,
        )

        self.table_persist_latency_seconds = Histogram(
            "tabdb_table_persist_latency_seconds",
            "Table write latency in seconds",
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5),
            registry=self._registry,
        )

        self.tables_loaded_total = Counter(
            "tabdb_tables_loaded_total",
            "Total table files loaded from disk",
            registry=self._registry,
        )

        # Session metrics
        self.sessions_active = Gauge(
            "tabdb_sessions_active",
            "Number of open sessions",
            registry=self._registry,
        )

        self.databases_resident = Gauge(
            "tabdb_databases_resident",
            "Number of databases held in memory",
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "tabdb",
            "tabdb server information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The collector registry these metrics are registered with."""
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from tabdb import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
