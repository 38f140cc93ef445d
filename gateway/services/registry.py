"""
AdapterRegistry - Named adapter descriptors, built once at startup.
"""

from typing import Iterable

from loguru import logger

from gateway.services.errors import (
    AdapterNotFoundError,
    ConfigurationError,
    DuplicateAdapterError,
)
from gateway.services.models import AdapterDescriptor


class AdapterRegistry:
    """
    Holds one descriptor per logical backend name.

    Descriptors are registered while the registry is being built; after
    ``freeze()`` it is read-only and lookups need no synchronization.

    Usage:
        registry = AdapterRegistry([weather, example])
        descriptor = registry.resolve("weather-api")
    """

    def __init__(self, descriptors: Iterable[AdapterDescriptor] = (), freeze: bool = True):
        self._adapters: dict[str, AdapterDescriptor] = {}
        self._frozen = False

        for descriptor in descriptors:
            self.register(descriptor)

        if freeze:
            self.freeze()

    def register(self, descriptor: AdapterDescriptor) -> None:
        """Add an adapter. Names must be unique."""
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register adapter '{descriptor.name}': registry is frozen",
                adapter_name=descriptor.name,
            )
        if descriptor.name in self._adapters:
            raise DuplicateAdapterError(descriptor.name)

        self._adapters[descriptor.name] = descriptor
        logger.info(f"Adapter registered: {descriptor.name} -> {descriptor.base_url}")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, name: str) -> AdapterDescriptor:
        """Look up an adapter by name."""
        try:
            return self._adapters[name]
        except KeyError:
            raise AdapterNotFoundError(name) from None

    def list(self) -> list[str]:
        """Registered adapter names, in registration order."""
        return list(self._adapters)

    def is_healthy(self, name: str) -> bool:
        """An adapter is healthy when it is registered."""
        return name in self._adapters

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)

    def __iter__(self):
        return iter(self._adapters.values())
