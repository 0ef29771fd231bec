"""Dependency injection container."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from tabdb.infrastructure.config import Config

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Supports singleton and factory registrations with lazy initialization.
    """

    def __init__(self) -> None:
        self._singletons: dict[type, Any] = {}
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """
        Register a ready-made instance.

        Args:
            interface: The interface/type to register
            instance: The singleton instance
        """
        self._singletons[interface] = instance
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
    ) -> None:
        """
        Register a factory, called once on first resolve.

        Args:
            interface: The interface/type to register
            factory: Factory function that takes the container and returns an instance
        """
        self._factories[interface] = factory
        self._instances.pop(interface, None)

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a dependency.

        Raises:
            KeyError: If no registration exists for the interface
        """
        if interface in self._instances:
            return self._instances[interface]

        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance

        raise KeyError(f"No registration found for {interface}")

    def has(self, interface: type) -> bool:
        """Check if an interface is registered."""
        return interface in self._singletons or interface in self._factories

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._singletons.clear()
        self._factories.clear()
        self._instances.clear()


def build_container(config: Config, metrics: Any | None = None) -> Container:
    """
    Wire the engine's components from a configuration.

    Registers Config, MetricsRegistry, TableStorage, Catalog and
    CommandEngine. Components are created lazily on first resolve.

    Args:
        config: Configuration to build from
        metrics: Optional MetricsRegistry (default: the global one)

    Returns:
        A populated container
    """
    from tabdb.adapters.outbound import TabFileStorage
    from tabdb.application import Catalog, CommandEngine
    from tabdb.infrastructure.metrics import MetricsRegistry, get_metrics
    from tabdb.ports.outbound import TableStorage

    container = Container()
    container.register_singleton(Config, config)
    container.register_singleton(MetricsRegistry, metrics or get_metrics())

    container.register_factory(
        TableStorage,
        lambda c: TabFileStorage(
            root=c.resolve(Config).storage.data_dir,
            suffix=c.resolve(Config).storage.table_suffix,
            fsync=c.resolve(Config).storage.fsync,
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    container.register_factory(
        Catalog,
        lambda c: Catalog(
            c.resolve(TableStorage),
            insert_mode=c.resolve(Config).storage.insert_mode,
            metrics=c.resolve(MetricsRegistry),
        ),
    )
    container.register_factory(
        CommandEngine,
        lambda c: CommandEngine(c.resolve(Catalog), metrics=c.resolve(MetricsRegistry)),
    )
    return container
