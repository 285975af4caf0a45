from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar, overload

from wirebox._internal.integrations.pydantic_settings import (
    build_settings,
    is_pydantic_settings_subclass,
)
from wirebox._internal.type_checks import immediate_parent, is_primitive_like, is_runtime_class
from wirebox.exceptions import (
    CannotInstantiateValueError,
    ContainerDisposedError,
    InvalidServiceOptionsError,
    MultipleServicesError,
    ServiceNotFoundError,
    describe_identifier,
)
from wirebox.handlers import Handler
from wirebox.metadata import (
    EMPTY,
    MultiServiceEntry,
    ServiceFactory,
    ServiceMetadata,
    ServiceScope,
)
from wirebox.token import Token

if TYPE_CHECKING:
    from typing_extensions import Self

    from wirebox.container_registry import ContainerRegistry
    from wirebox.type_provider import ParameterType

T = TypeVar("T")

logger = logging.getLogger(__name__)
_UNSET: Any = object()
_UNRESOLVED: Any = object()


class ResetStrategy(str, Enum):
    """Select what ``ContainerInstance.reset`` throws away."""

    RESET_VALUE = "resetValue"
    """Drop constructed values but keep every registration."""

    RESET_SERVICES = "resetServices"
    """Drop constructed values and all registrations."""


class ContainerInstance:
    """Resolve, cache and dispose services registered under identifiers.

    Identifiers are classes, plain callables, ``Token`` objects or strings.
    Services default to container scope: every container builds and keeps its
    own instance. Singleton services always live in the registry's default
    container and are shared by every container of that registry. Transient
    services are rebuilt on each request.

    A container that has no metadata for an identifier falls back to the
    default container: it copies the metadata locally on first access and
    builds its own instance from it.

    Examples:
        .. code-block:: python

            container = ContainerRegistry().default_container
            container.set(Engine)
            container.set(Car)

            car = container.get(Car)
            assert car.engine is container.get(Engine)

    """

    def __init__(
        self,
        container_id: Any,
        *,
        registry: ContainerRegistry | None = None,
        handlers: Iterable[Handler] | None = None,
    ) -> None:
        """Create a container bound to ``registry``.

        The container is not registered; use ``ContainerInstance.of`` or
        ``ContainerRegistry.register_container`` for that.

        Args:
            container_id: Identifier of the container, unique within a registry.
            registry: Registry that owns the default container used for
                singleton and fallback lookups. Defaults to the current registry.
            handlers: Initial handler list, copied. Defaults to the handlers
                the registry's default container holds right now.

        """
        if registry is None:
            from wirebox.container_registry import registry_context

            registry = registry_context.get_current()
        if handlers is None:
            handlers = registry.default_container.handlers

        self.id = container_id
        self.registry = registry
        self.disposed = False
        self._metadata_map: dict[Any, ServiceMetadata] = {}
        self._multi_service_ids: dict[Any, MultiServiceEntry] = {}
        self._handlers: list[Handler] = list(handlers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    @property
    def is_default(self) -> bool:
        return self is self.registry.default_container

    # region Lookup
    def has(self, identifier: Any) -> bool:
        """Return whether this container holds metadata for ``identifier``.

        Only the container's own registrations are checked, not the default
        container's.
        """
        self._throw_if_disposed()
        return identifier in self._metadata_map or identifier in self._multi_service_ids

    @overload
    def get(self, identifier: type[T]) -> T: ...

    @overload
    def get(self, identifier: Token[T]) -> T: ...

    @overload
    def get(self, identifier: Any) -> Any: ...

    def get(self, identifier: Any) -> Any:
        """Return the value of the service registered under ``identifier``.

        Singleton metadata of the default container wins over local metadata.
        On first access from a non-default container, metadata found only in
        the default container is copied locally before the value is built, so
        that a cyclic lookup through the same identifier finds the copy.

        Raises:
            ServiceNotFoundError: If no reachable metadata exists.
            MultipleServicesError: If the identifier was registered with
                ``multiple=True``.
            CannotInstantiateValueError: If the metadata has no way to build
                the value.

        """
        self._throw_if_disposed()
        default_container = self.registry.default_container
        global_metadata = default_container._metadata_map.get(identifier)
        local_metadata = self._metadata_map.get(identifier)

        if global_metadata is not None and global_metadata.scope is ServiceScope.SINGLETON:
            metadata: ServiceMetadata | None = global_metadata
        else:
            metadata = local_metadata

        if metadata is not None:
            if metadata.multiple:
                raise MultipleServicesError(identifier)
            return self._get_service_value(metadata)

        if (
            identifier in self._multi_service_ids
            or identifier in default_container._multi_service_ids
        ):
            raise MultipleServicesError(identifier)

        if global_metadata is not None and self is not default_container:
            return self._get_from_default_container(global_metadata)

        if self.registry.autoregister_settings and is_pydantic_settings_subclass(identifier):
            logger.debug("Autoregistering settings class %s as a singleton", identifier)
            default_container.set(
                identifier,
                factory=build_settings,
                scope=ServiceScope.SINGLETON,
            )
            return self.get(identifier)

        raise ServiceNotFoundError(identifier)

    @overload
    def get_many(self, identifier: type[T]) -> list[T]: ...

    @overload
    def get_many(self, identifier: Token[T]) -> list[T]: ...

    @overload
    def get_many(self, identifier: Any) -> list[Any]: ...

    def get_many(self, identifier: Any) -> list[Any]:
        """Return every value registered with ``multiple=True`` under ``identifier``.

        Values come back in registration order.

        Raises:
            ServiceNotFoundError: If nothing was registered as multiple under
                ``identifier``.

        """
        self._throw_if_disposed()
        entry = self._find_multi_service_entry(identifier)
        if entry is None:
            raise ServiceNotFoundError(identifier)
        return [self.get(token) for token in entry.tokens]

    # endregion Lookup

    # region Registration
    def set(  # noqa: PLR0913
        self,
        id: Any = _UNSET,  # noqa: A002
        value: Any = _UNSET,
        *,
        type: type[Any] | None = None,  # noqa: A002
        factory: ServiceFactory | None = None,
        scope: ServiceScope | str = ServiceScope.CONTAINER,
        multiple: bool = False,
        eager: bool = False,
    ) -> Self:
        """Register a service.

        ``id`` defaults to ``type``. A class passed as ``id`` without a
        ``type``, ``factory`` or ``value`` is constructed from itself.
        Registering an existing id again updates its metadata in place,
        which also drops the cached value.

        Args:
            id: Identifier of the service.
            value: Ready-made value. It is returned as-is and never rebuilt.
            type: Class to construct, with constructor dependencies resolved
                from this container.
            factory: Callable invoked as ``factory(container, id)``, or a
                ``(factory_id, method_name)`` pair naming a method of another
                service.
            scope: ``ServiceScope`` member or its string value.
            multiple: Add one more implementation under ``id`` instead of
                replacing it; read them back with ``get_many``.
            eager: Build the value right away instead of on first request.

        Raises:
            InvalidServiceOptionsError: If neither ``id`` nor ``type`` is given
                or ``scope`` is unknown.

        """
        self._throw_if_disposed()
        try:
            resolved_scope = ServiceScope(scope)
        except ValueError as error:
            msg = f"Unknown service scope {scope!r}."
            raise InvalidServiceOptionsError(msg) from error

        if id is _UNSET:
            if type is None:
                msg = "set() requires an 'id' or a 'type'."
                raise InvalidServiceOptionsError(msg)
            id = type  # noqa: A001
        if type is None and factory is None and value is _UNSET and is_runtime_class(id):
            type = id  # noqa: A001

        if resolved_scope is ServiceScope.SINGLETON and not self.is_default:
            self.registry.default_container.set(
                id,
                value,
                type=type,
                factory=factory,
                scope=resolved_scope,
                multiple=multiple,
                eager=eager,
            )
            return self

        metadata = ServiceMetadata(
            id=id,
            scope=resolved_scope,
            type=type,
            factory=factory,
            value=EMPTY if value is _UNSET else value,
            multiple=multiple,
            eager=eager,
            referenced_by={self.id},
        )

        if multiple:
            stored = self._add_multiple(id, metadata)
        else:
            existing = self._metadata_map.get(id)
            if existing is not None:
                self._merge_metadata(existing, metadata)
                stored = existing
            else:
                self._metadata_map[id] = metadata
                stored = metadata

        if stored.eager and not stored.is_transient:
            logger.debug("Eagerly resolving %s in container %r", describe_identifier(id), self.id)
            self.get(stored.id)

        return self

    def remove(self, identifier: Any | list[Any]) -> Self:
        """Dispose and unregister one identifier or a list of identifiers.

        Removing a multi-service identifier removes every implementation
        registered under it. Unknown identifiers are ignored.
        """
        self._throw_if_disposed()
        identifiers = identifier if isinstance(identifier, list) else [identifier]
        for service_id in identifiers:
            entry = self._multi_service_ids.pop(service_id, None)
            member_ids = entry.tokens if entry is not None else [service_id]
            for member_id in member_ids:
                metadata = self._metadata_map.pop(member_id, None)
                if metadata is not None:
                    self._dispose_value(metadata)
        return self

    def register_handler(self, handler: Handler) -> Self:
        """Append a parameter or property handler to this container."""
        self._throw_if_disposed()
        self._handlers.append(handler)
        return self

    # endregion Registration

    # region Lifecycle
    def of(self, container_id: Any) -> ContainerInstance:
        """Return the container registered under ``container_id``, creating it if needed.

        The reserved default id returns the default container. A newly created
        container starts with a copy of this container's handlers.
        """
        self._throw_if_disposed()
        registry = self.registry
        if container_id == registry.default_container_id:
            return registry.default_container
        if registry.has_container(container_id):
            return registry.get_container(container_id)

        container = ContainerInstance(container_id, registry=registry, handlers=self._handlers)
        registry.register_container(container)
        return container

    def find_of(self, container_id: Any) -> ContainerInstance | None:
        """Return this container when its id is ``container_id``, else ``None``."""
        return self if self.id == container_id else None

    def reset(self, strategy: ResetStrategy | str = ResetStrategy.RESET_VALUE) -> Self:
        """Dispose constructed values, optionally dropping the registrations too.

        Values provided directly with ``set(value=...)`` belong to the caller:
        they are neither disposed nor cleared by ``RESET_VALUE``.

        Raises:
            InvalidServiceOptionsError: If ``strategy`` is unknown.

        """
        self._throw_if_disposed()
        try:
            resolved_strategy = ResetStrategy(strategy)
        except ValueError as error:
            msg = f"Received invalid reset strategy {strategy!r}."
            raise InvalidServiceOptionsError(msg) from error

        for metadata in list(self._metadata_map.values()):
            self._dispose_value(metadata)

        if resolved_strategy is ResetStrategy.RESET_SERVICES:
            self._metadata_map.clear()
            self._multi_service_ids.clear()
        return self

    def dispose(self) -> None:
        """Reset all services and make the container unusable."""
        self._throw_if_disposed()
        self.reset(ResetStrategy.RESET_SERVICES)
        self.disposed = True
        logger.debug("Disposed container %r", self.id)

    # endregion Lifecycle

    # region Value production
    def _get_from_default_container(self, global_metadata: ServiceMetadata) -> Any:
        # The copy is stored before the value is built; a cycle back to this
        # identifier resolves against it instead of cloning again.
        clone = dataclasses.replace(global_metadata, referenced_by={self.id})
        if clone.is_constructible:
            clone.value = EMPTY
        self._metadata_map[clone.id] = clone
        return self._get_service_value(clone)

    def _get_service_value(self, metadata: ServiceMetadata) -> Any:
        if metadata.has_value:
            return metadata.value

        if metadata.factory is not None:
            value = self._call_factory(metadata.factory, metadata.id)
        elif metadata.type is not None:
            value = self._construct(metadata.type)
        else:
            raise CannotInstantiateValueError(metadata.id)

        if value is EMPTY:
            raise CannotInstantiateValueError(metadata.id)

        if not metadata.is_transient:
            metadata.value = value

        if metadata.type is not None:
            self._apply_property_handlers(metadata.type, value)

        return value

    def _call_factory(self, factory: ServiceFactory, identifier: Any) -> Any:
        if isinstance(factory, tuple):
            factory_id, method_name = factory
            try:
                factory_instance = self.get(factory_id)
            except ServiceNotFoundError:
                factory_instance = factory_id()
            return getattr(factory_instance, method_name)(self, identifier)
        return factory(self, identifier)

    def _construct(self, target: type[Any]) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in self.registry.type_provider.get_parameter_types(target):
            argument = self._resolve_parameter(target, parameter)
            if argument is _UNRESOLVED:
                if parameter.has_default:
                    continue
                argument = None
            if parameter.is_positional_only:
                args.append(argument)
            else:
                kwargs[parameter.name] = argument
        return target(*args, **kwargs)

    def _resolve_parameter(self, target: type[Any], parameter: ParameterType) -> Any:
        handler = self._find_parameter_handler(target, parameter.index)
        if handler is not None:
            return handler.value_provider(self)

        service_id = parameter.service_id
        if service_id is None or is_primitive_like(service_id):
            return _UNRESOLVED
        if is_runtime_class(service_id) and issubclass(service_id, ContainerInstance):
            return self
        return self.get(service_id)

    def _find_parameter_handler(self, target: type[Any], index: int) -> Handler | None:
        # Only the direct parent is consulted; grandparents are not walked.
        candidates = [target]
        parent = immediate_parent(target)
        if parent is not None:
            candidates.append(parent)

        for candidate in candidates:
            for handler in self._handlers:
                if handler.matches_parameter(candidate, index):
                    return handler
        return None

    def _apply_property_handlers(self, target: type[Any], instance: Any) -> None:
        for handler in self._handlers:
            if handler.property_name is None:
                continue
            if not issubclass(target, handler.target_type):
                continue
            setattr(instance, handler.property_name, handler.value_provider(self))

    # endregion Value production

    # region Internals
    def _find_multi_service_entry(self, identifier: Any) -> MultiServiceEntry | None:
        default_container = self.registry.default_container
        global_entry = default_container._multi_service_ids.get(identifier)
        if global_entry is not None and global_entry.scope is ServiceScope.SINGLETON:
            return global_entry

        local_entry = self._multi_service_ids.get(identifier)
        if local_entry is not None:
            return local_entry

        if global_entry is not None and self is not default_container:
            local_entry = MultiServiceEntry(scope=global_entry.scope, tokens=list(global_entry.tokens))
            self._multi_service_ids[identifier] = local_entry
            return local_entry
        return None

    def _add_multiple(self, identifier: Any, metadata: ServiceMetadata) -> ServiceMetadata:
        token: Token[Any] = Token(f"MultipleService<{describe_identifier(identifier)}>")
        entry = self._multi_service_ids.get(identifier)
        if entry is None:
            entry = MultiServiceEntry(scope=metadata.scope)
            self._multi_service_ids[identifier] = entry
        entry.tokens.append(token)

        metadata.id = token
        metadata.multiple = False
        self._metadata_map[token] = metadata
        return metadata

    @staticmethod
    def _merge_metadata(existing: ServiceMetadata, new: ServiceMetadata) -> None:
        for metadata_field in dataclasses.fields(ServiceMetadata):
            if metadata_field.name == "referenced_by":
                continue
            setattr(existing, metadata_field.name, getattr(new, metadata_field.name))
        existing.referenced_by |= new.referenced_by

    @staticmethod
    def _dispose_value(metadata: ServiceMetadata) -> None:
        if not (metadata.has_value and metadata.is_constructible):
            return

        value = metadata.value
        metadata.value = EMPTY
        dispose_hook = getattr(value, "dispose", None)
        if not callable(dispose_hook):
            return
        try:
            dispose_hook()
        except Exception:
            logger.warning(
                "Disposing the value of service %s failed",
                describe_identifier(metadata.id),
                exc_info=True,
            )

    def _throw_if_disposed(self) -> None:
        if self.disposed:
            raise ContainerDisposedError(self.id)

    # endregion Internals
