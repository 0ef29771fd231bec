"""Unit tests for configuration and wiring."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tabdb.__main__ import apply_overrides, build_parser
from tabdb.adapters.outbound import TabFileStorage
from tabdb.application import Catalog, CommandEngine
from tabdb.infrastructure.config import Config, ServerConfig, StorageConfig
from tabdb.infrastructure.container import Container, build_container
from tabdb.infrastructure.metrics import MetricsRegistry
from tabdb.ports.outbound import TableStorage


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        config = Config()

        assert config.storage.data_dir == Path("databases")
        assert config.storage.table_suffix == ".tab"
        assert config.storage.insert_mode == "rewrite"
        assert config.server.port == 8888
        assert config.observability.log_format == "json"

    def test_ensure_directories(self, temp_dir: Path) -> None:
        config = Config(storage=StorageConfig(data_dir=temp_dir / "nested" / "dbs"))

        config.ensure_directories()

        assert config.storage.data_dir.is_dir()

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        monkeypatch.setenv("TABDB_STORAGE__DATA_DIR", str(temp_dir))
        monkeypatch.setenv("TABDB_STORAGE__INSERT_MODE", "append")
        monkeypatch.setenv("TABDB_SERVER__PORT", "9999")
        monkeypatch.setenv("TABDB_OBSERVABILITY__OTEL_CONSOLE_EXPORT", "true")

        config = Config()

        assert config.storage.data_dir == temp_dir
        assert config.storage.insert_mode == "append"
        assert config.server.port == 9999
        assert config.observability.otel_console_export is True

    def test_invalid_insert_mode(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(insert_mode="sometimes")

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_command_line_overrides(self, temp_dir: Path) -> None:
        args = build_parser().parse_args(
            ["--port", "7000", "--data-dir", str(temp_dir), "--no-metrics", "--log-format", "console"]
        )

        config = apply_overrides(Config(), args)

        assert config.server.port == 7000
        assert config.storage.data_dir == temp_dir
        assert config.observability.metrics_enabled is False
        assert config.observability.log_format == "console"
        assert config.server.http_port == 8000


@pytest.mark.unit
class TestContainer:
    """Tests for the DI container."""

    def test_singleton(self, container: Container) -> None:
        config = Config()
        container.register_singleton(Config, config)
        assert container.has(Config)
        assert container.resolve(Config) is config

    def test_factory_is_lazy_and_cached(self, container: Container) -> None:
        calls = []

        def factory(c: Container) -> list:
            calls.append(1)
            return ["made"]

        container.register_factory(list, factory)
        assert calls == []
        assert container.resolve(list) is container.resolve(list)
        assert calls == [1]

    def test_missing_registration(self, container: Container) -> None:
        with pytest.raises(KeyError):
            container.resolve(dict)

    def test_build_container(self, test_config: Config, metrics_registry: MetricsRegistry) -> None:
        container = build_container(test_config, metrics_registry)

        storage = container.resolve(TableStorage)
        engine = container.resolve(CommandEngine)

        assert isinstance(storage, TabFileStorage)
        assert storage.root == test_config.storage.data_dir
        assert engine.catalog is container.resolve(Catalog)
        assert container.resolve(MetricsRegistry) is metrics_registry
