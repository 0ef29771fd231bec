"""Infrastructure layer - cross-cutting concerns.

The container module wires application components and is imported
directly as ``tabdb.infrastructure.container``.
"""

from tabdb.infrastructure.config import Config, get_config
from tabdb.infrastructure.logging import get_logger, setup_logging
from tabdb.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from tabdb.infrastructure.tracing import setup_tracing, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "trace_span",
]
