from __future__ import annotations

from typing import Any

from wirebox.token import Token


def describe_identifier(identifier: Any) -> str:
    """Return a short human-readable name for a service identifier."""
    if isinstance(identifier, str):
        return identifier
    if isinstance(identifier, Token):
        return f"Token<{identifier.name or 'UNSET_NAME'}>"
    name = getattr(identifier, "__qualname__", None) or getattr(identifier, "__name__", None)
    if name:
        return f"MaybeConstructable<{name}>"
    return repr(identifier)


class WireboxError(Exception):
    """Represent a base class for all wirebox-specific failures.

    Catch this type when you want to handle any wirebox error path without
    matching each concrete exception class individually.
    """


class ServiceNotFoundError(WireboxError):
    """Signal that a service identifier has no reachable metadata.

    Raised by ``ContainerInstance.get`` and ``ContainerInstance.get_many`` when
    neither the container nor the default container knows the identifier.

    Typical fix is registering the service (``container.set(...)`` or the
    ``@service`` decorator) before it is requested.
    """

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        name = describe_identifier(identifier)
        super().__init__(
            f'Service "{name}" was not found, looks like it was not registered in the '
            "container. Register it by calling container.set(...) before using the service.",
        )


class CannotInstantiateValueError(WireboxError):
    """Signal metadata that has neither a factory nor a type to build from."""

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(
            f'Cannot instantiate the requested value for the "{describe_identifier(identifier)}" '
            "identifier. The related metadata doesn't contain a factory or a type to instantiate.",
        )


class CannotInjectValueError(WireboxError):
    """Signal an injection site whose identifier cannot be determined.

    Raised when an ``Inject`` marker resolves to no identifier or to a type that
    carries no information (``object``/``Any``), and when an annotation cannot be
    evaluated.

    Typical fixes include annotating the member with a concrete class or passing
    an explicit identifier (string, ``Token`` or ``lazy(...)``) to ``Inject``.
    """

    def __init__(self, target: Any, member: str) -> None:
        self.target = target
        self.member = member
        target_name = getattr(target, "__qualname__", repr(target))
        super().__init__(
            f'Cannot inject value into "{target_name}.{member}". Annotate it with a concrete '
            "class or pass an explicit identifier; protocols and interfaces need a Token.",
        )


class ContainerNotFoundError(WireboxError):
    """Signal a lookup of a container id that is not in the registry."""

    def __init__(self, container_id: Any) -> None:
        self.container_id = container_id
        super().__init__(
            f'Container with "{container_id}" identifier was not found in the container registry. '
            "Register it before usage via ContainerRegistry.register_container().",
        )


class CannotRegisterContainerError(WireboxError):
    """Signal a duplicate or reserved container id passed to ``register_container``."""


class ContainerDisposedError(WireboxError):
    """Signal use of a container after ``dispose()`` was called."""

    def __init__(self, container_id: Any) -> None:
        self.container_id = container_id
        super().__init__(f'Cannot use container "{container_id}" after it has been disposed.')


class MultipleServicesError(WireboxError):
    """Signal ``get`` on an identifier registered with ``multiple=True``.

    Multi-valued identifiers are read through ``get_many``.
    """

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(
            f'Service "{describe_identifier(identifier)}" is registered as multiple; '
            "use get_many() to retrieve its values.",
        )


class InvalidServiceOptionsError(WireboxError):
    """Signal invalid arguments to ``set`` or ``reset``."""


class InvalidHandlerError(WireboxError):
    """Signal a handler that targets both or neither of a property and a parameter."""
