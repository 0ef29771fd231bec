"""Process entry point: ``python -m tabdb`` or the ``tabdb`` script."""

from __future__ import annotations

import argparse
import threading
from pathlib import Path
from typing import Sequence

from tabdb import __version__
from tabdb.adapters.inbound.rest_api import run_server
from tabdb.adapters.inbound.tcp_server import run_tcp_server
from tabdb.application import CommandEngine
from tabdb.infrastructure.config import Config, get_config
from tabdb.infrastructure.container import build_container
from tabdb.infrastructure.logging import get_logger, setup_logging
from tabdb.infrastructure.metrics import get_metrics, setup_metrics
from tabdb.infrastructure.tracing import setup_tracing


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabdb",
        description="tabdb - line-protocol table store",
    )
    parser.add_argument("--host", help="Interface to bind (default from TABDB_SERVER__HOST)")
    parser.add_argument("--port", type=int, help="Line-protocol TCP port")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the databases")
    parser.add_argument("--http", action="store_true", help="Also serve the HTTP API")
    parser.add_argument("--http-port", type=int, help="HTTP API port")
    parser.add_argument("--metrics-port", type=int, help="Prometheus metrics port")
    parser.add_argument("--no-metrics", action="store_true", help="Do not expose metrics")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level",
    )
    parser.add_argument("--log-format", choices=["json", "console"], help="Log format")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a copy of the config with command-line values applied."""
    storage: dict = {}
    server: dict = {}
    observability: dict = {}

    if args.data_dir is not None:
        storage["data_dir"] = args.data_dir
    if args.host is not None:
        server["host"] = args.host
    if args.port is not None:
        server["port"] = args.port
    if args.http_port is not None:
        server["http_port"] = args.http_port
    if args.metrics_port is not None:
        server["metrics_port"] = args.metrics_port
    if args.no_metrics:
        observability["metrics_enabled"] = False
    if args.log_level is not None:
        observability["log_level"] = args.log_level
    if args.log_format is not None:
        observability["log_format"] = args.log_format

    return config.model_copy(
        update={
            "storage": config.storage.model_copy(update=storage),
            "server": config.server.model_copy(update=server),
            "observability": config.observability.model_copy(update=observability),
        }
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = apply_overrides(get_config(), args)
    config.ensure_directories()

    obs = config.observability
    setup_logging(obs.log_level, obs.log_format)
    setup_tracing(obs.otel_service_name, obs.otel_endpoint, obs.otel_console_export)
    if obs.metrics_enabled:
        metrics = setup_metrics(config.server.metrics_port)
    else:
        metrics = get_metrics()

    logger = get_logger(__name__)
    engine = build_container(config, metrics).resolve(CommandEngine)
    logger.info(
        "tabdb_starting",
        version=__version__,
        data_dir=str(config.storage.data_dir),
        insert_mode=config.storage.insert_mode,
    )

    if args.http:
        http_thread = threading.Thread(
            target=run_server,
            args=(engine, config.server.host, config.server.http_port),
            name="tabdb-http",
            daemon=True,
        )
        http_thread.start()

    try:
        run_tcp_server(
            engine,
            config.server.host,
            config.server.port,
            config.server.max_line_bytes,
        )
    except KeyboardInterrupt:
        logger.info("tabdb_stopping")
    finally:
        engine.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
