from __future__ import annotations

from typing import TYPE_CHECKING, Any

from wirebox.container_instance import ContainerInstance, ResetStrategy
from wirebox.exceptions import ContainerDisposedError, ServiceNotFoundError
from wirebox.handlers import Handler

if TYPE_CHECKING:
    from typing_extensions import Self

    from wirebox.container_registry import ContainerRegistry


class ContainerCluster:
    """One logical container spread over several member containers.

    Lookups try the members in order and the first member that knows the
    identifier wins. Registrations always go to the cluster's own private
    container, which is the first member.
    """

    def __init__(self, cluster_container: ContainerInstance) -> None:
        self.cluster_container = cluster_container
        self.disposed = False
        self._containers: list[ContainerInstance] = [cluster_container]

    @classmethod
    def create(cls, container_id: Any, registry: ContainerRegistry | None = None) -> ContainerCluster:
        """Build a cluster around a new, unregistered private container.

        The private container starts with the handlers of the default container.
        """
        return cls(ContainerInstance(container_id, registry=registry))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, members={len(self._containers)})"

    @property
    def id(self) -> Any:
        return self.cluster_container.id

    @property
    def containers(self) -> tuple[ContainerInstance, ...]:
        return tuple(self._containers)

    def is_cluster_container(self, container: ContainerInstance) -> bool:
        return container is self.cluster_container

    def add_container(self, container: ContainerInstance) -> None:
        self._throw_if_disposed()
        if container not in self._containers:
            self._containers.append(container)

    def remove_container(self, container: ContainerInstance) -> None:
        self._throw_if_disposed()
        if container in self._containers:
            self._containers.remove(container)

    def has(self, identifier: Any) -> bool:
        self._throw_if_disposed()
        return any(container.has(identifier) for container in self._containers)

    def get(self, identifier: Any) -> Any:
        """Return the value from the first member that can resolve ``identifier``.

        Raises:
            ServiceNotFoundError: The last member's error when no member
                knows the identifier.

        """
        self._throw_if_disposed()
        last_error: ServiceNotFoundError | None = None
        for container in self._containers:
            try:
                return container.get(identifier)
            except ServiceNotFoundError as error:
                last_error = error
        if last_error is None:
            raise ServiceNotFoundError(identifier)
        raise last_error

    def get_many(self, identifier: Any) -> list[Any]:
        """Concatenate the multi-service values of every member that has them."""
        self._throw_if_disposed()
        values: list[Any] = []
        last_error: ServiceNotFoundError | None = None
        found = False
        for container in self._containers:
            try:
                values.extend(container.get_many(identifier))
            except ServiceNotFoundError as error:
                last_error = error
            else:
                found = True
        if not found and last_error is not None:
            raise last_error
        return values

    def set(self, *args: Any, **kwargs: Any) -> Self:
        """Register a service in the private container; see ``ContainerInstance.set``."""
        self._throw_if_disposed()
        self.cluster_container.set(*args, **kwargs)
        return self

    def register_handler(self, handler: Handler) -> Self:
        self._throw_if_disposed()
        self.cluster_container.register_handler(handler)
        return self

    def remove(self, identifier: Any | list[Any]) -> Self:
        self._throw_if_disposed()
        for container in self._containers:
            container.remove(identifier)
        return self

    def reset(self, strategy: ResetStrategy | str = ResetStrategy.RESET_VALUE) -> Self:
        self._throw_if_disposed()
        for container in self._containers:
            container.reset(strategy)
        return self

    def find_of(self, container_id: Any) -> ContainerInstance | None:
        for container in self._containers:
            found = container.find_of(container_id)
            if found is not None:
                return found
        return None

    def of(self, container_id: Any) -> ContainerInstance:
        """Return the member with ``container_id``, adding a new one when missing."""
        self._throw_if_disposed()
        existing = self.find_of(container_id)
        if existing is not None:
            return existing

        container = ContainerInstance(
            container_id,
            registry=self.cluster_container.registry,
            handlers=self.cluster_container.handlers,
        )
        self.add_container(container)
        return container

    def dispose(self) -> None:
        """Dispose every member container."""
        self._throw_if_disposed()
        self.disposed = True
        for container in self._containers:
            if not container.disposed:
                container.dispose()

    def _throw_if_disposed(self) -> None:
        if self.disposed:
            raise ContainerDisposedError(self.id)
