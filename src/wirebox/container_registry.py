from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from wirebox.container_instance import ContainerInstance
from wirebox.exceptions import CannotRegisterContainerError, ContainerNotFoundError
from wirebox.type_provider import AnnotationTypeProvider, TypeProvider

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_ID = "default"


class ContainerRegistry:
    """Directory of named containers around one default container.

    The default container holds singleton services and the registrations that
    other containers fall back to. It is created with the registry and can
    never be registered under its reserved id.
    """

    default_container_id = DEFAULT_CONTAINER_ID

    def __init__(
        self,
        *,
        type_provider: TypeProvider | None = None,
        autoregister_settings: bool = True,
    ) -> None:
        """Create a registry and its default container.

        Args:
            type_provider: Captures constructor parameter and property
                identifiers. Defaults to ``AnnotationTypeProvider``.
            autoregister_settings: Resolve unregistered pydantic-settings
                classes as singletons built from the environment.

        """
        self.type_provider: TypeProvider = type_provider or AnnotationTypeProvider()
        self.autoregister_settings = autoregister_settings
        self._containers: dict[Any, ContainerInstance] = {}
        self.default_container = ContainerInstance(
            self.default_container_id,
            registry=self,
            handlers=(),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(containers={list(self._containers)!r})"

    def register_container(self, container: ContainerInstance) -> None:
        """Add ``container`` to the registry.

        Raises:
            CannotRegisterContainerError: If the id is the reserved default id
                or is already registered.

        """
        if container.id == self.default_container_id:
            msg = f'You cannot register a container with the "{self.default_container_id}" ID.'
            raise CannotRegisterContainerError(msg)
        if container.id in self._containers:
            msg = f'Cannot register container with same ID "{container.id}".'
            raise CannotRegisterContainerError(msg)

        self._containers[container.id] = container
        logger.debug("Registered container %r", container.id)

    def has_container(self, container_id: Any) -> bool:
        return container_id in self._containers

    def get_container(self, container_id: Any) -> ContainerInstance:
        """Return the registered container or raise ``ContainerNotFoundError``."""
        container = self._containers.get(container_id)
        if container is None:
            raise ContainerNotFoundError(container_id)
        return container

    def remove_container(self, container: ContainerInstance) -> None:
        """Unregister ``container`` and dispose it.

        Raises:
            ContainerNotFoundError: If the container is not registered.

        """
        registered_container = self._containers.get(container.id)
        if registered_container is None:
            raise ContainerNotFoundError(container.id)

        del self._containers[container.id]
        logger.debug("Removed container %r", container.id)
        registered_container.dispose()

    def dispose(self) -> None:
        """Remove and dispose every container, then the default container."""
        containers = list(self._containers.values())
        self._containers.clear()
        for container in containers:
            if not container.disposed:
                container.dispose()
        if not self.default_container.disposed:
            self.default_container.dispose()


class RegistryContext:
    """Holder of the process-wide current ``ContainerRegistry``.

    Declarative markers and containers created without an explicit registry
    use the current registry. Swap it in tests with ``use``.
    """

    def __init__(self, registry: ContainerRegistry | None = None) -> None:
        self._registry = registry or ContainerRegistry()

    def get_current(self) -> ContainerRegistry:
        return self._registry

    def set_current(self, registry: ContainerRegistry) -> ContainerRegistry:
        """Make ``registry`` current and return the previously current one."""
        previous = self._registry
        self._registry = registry
        return previous

    @contextmanager
    def use(self, registry: ContainerRegistry) -> Iterator[ContainerRegistry]:
        """Make ``registry`` current for the duration of the block."""
        previous = self.set_current(registry)
        try:
            yield registry
        finally:
            self.set_current(previous)


registry_context = RegistryContext()


def get_default_container() -> ContainerInstance:
    """Return the default container of the current registry."""
    return registry_context.get_current().default_container


__all__ = [
    "DEFAULT_CONTAINER_ID",
    "ContainerRegistry",
    "RegistryContext",
    "get_default_container",
    "registry_context",
]
