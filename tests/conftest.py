"""Pytest configuration and fixtures for tabdb tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from tabdb.adapters.outbound import TabFileStorage
from tabdb.application import Catalog, CommandEngine
from tabdb.infrastructure.config import Config, StorageConfig
from tabdb.infrastructure.container import Container
from tabdb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration rooted in a temporary directory."""
    return Config(
        storage=StorageConfig(
            data_dir=temp_dir / "databases",
            fsync=False,  # Faster for tests
        ),
    )


@pytest.fixture
def container() -> Generator[Container, None, None]:
    """Provide a fresh DI container for each test."""
    c = Container()
    yield c
    c.clear()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def storage(test_config: Config, metrics_registry: MetricsRegistry) -> TabFileStorage:
    """Provide tab-file storage under the test data directory."""
    return TabFileStorage(test_config.storage.data_dir, metrics=metrics_registry)


@pytest.fixture
def catalog(storage: TabFileStorage, metrics_registry: MetricsRegistry) -> Catalog:
    """Provide a catalog over the test storage."""
    return Catalog(storage, metrics=metrics_registry)


@pytest.fixture
def engine(catalog: Catalog, metrics_registry: MetricsRegistry) -> CommandEngine:
    """Provide a command engine over the test catalog."""
    return CommandEngine(catalog, metrics=metrics_registry)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
