from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Annotated, Any, TypeVar, get_args, get_origin, get_type_hints, overload

from wirebox._internal.type_checks import is_runtime_class
from wirebox.container_instance import ContainerInstance
from wirebox.container_registry import get_default_container
from wirebox.exceptions import CannotInjectValueError
from wirebox.handlers import Handler
from wirebox.lazy import LazyReference
from wirebox.metadata import ServiceFactory, ServiceScope
from wirebox.token import Token
from wirebox.type_provider import (
    element_type,
    hint_to_identifier,
    injectable_parameters,
    property_hint,
)

C = TypeVar("C", bound=type[Any])
_UNSET: Any = object()


class Inject:
    """Mark a property or constructor parameter for injection.

    As a class attribute, ``Inject`` registers a property handler on the
    default container (or ``container``) when the class body is executed.
    As ``typing.Annotated`` metadata of an ``__init__`` parameter, it is picked
    up by ``@service`` and registered as a parameter handler.

    The identifier may be a string, a ``Token``, a class, a ``lazy(...)``
    reference or a zero-argument callable returning a class. Without an
    identifier the annotation of the member is used.

    Parameter markers are only read by ``@service``. A class registered with
    ``container.set(...)`` ignores them and resolves the annotated type.

    Examples:
        .. code-block:: python

            @service
            class Car:
                engine: Engine = Inject()
                wheels = Inject("wheels")

                def __init__(self, driver: Annotated[Person, Inject("driver")]) -> None:
                    self.driver = driver

    """

    def __init__(self, identifier: Any = None, *, container: ContainerInstance | None = None) -> None:
        self.identifier = identifier
        self.container = container
        self.owner: type[Any] | None = None
        self.name: str | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier!r})"

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self.owner = owner
        self.name = name
        target_container = self.container or get_default_container()
        target_container.register_handler(
            Handler(
                target_type=owner,
                property_name=name,
                value_provider=lambda container: self.provide(
                    container,
                    owner,
                    name,
                    lambda: self.implicit_property_identifier(container, owner, name),
                ),
            ),
        )

    def __get__(self, instance: Any, owner: type[Any] | None = None) -> Any:
        if instance is None:
            return self
        msg = (
            f"{type(instance).__qualname__}.{self.name} is only set when the instance is "
            "resolved from a container."
        )
        raise AttributeError(msg)

    def parameter_handler(self, target: type[Any], index: int, name: str, hint: Any) -> Handler:
        """Build the handler for constructor parameter ``index`` annotated with ``hint``."""
        return Handler(
            target_type=target,
            parameter_index=index,
            value_provider=lambda container: self.provide(
                container,
                target,
                name,
                lambda: self.implicit_hint_identifier(hint),
            ),
        )

    def provide(
        self,
        container: ContainerInstance,
        target: type[Any],
        member: str,
        implicit: Callable[[], Any | None],
    ) -> Any:
        identifier = self.explicit_identifier()
        if identifier is None:
            identifier = implicit()
        if identifier is None or identifier is object or identifier is Any:
            raise CannotInjectValueError(target, member)
        return self.resolve(container, identifier)

    def explicit_identifier(self) -> Any | None:
        identifier = self.identifier
        if identifier is None or isinstance(identifier, (str, Token)) or is_runtime_class(identifier):
            return identifier
        if isinstance(identifier, LazyReference):
            return identifier.get()
        if callable(identifier):
            return identifier()
        return identifier

    def implicit_property_identifier(
        self,
        container: ContainerInstance,
        owner: type[Any],
        name: str,
    ) -> Any | None:
        return container.registry.type_provider.lookup_property_type(owner, name)

    def implicit_hint_identifier(self, hint: Any) -> Any | None:
        return hint_to_identifier(hint)

    def resolve(self, container: ContainerInstance, identifier: Any) -> Any:
        return container.get(identifier)


class InjectMany(Inject):
    """Like ``Inject`` but injects every value registered with ``multiple=True``.

    Implicit identifiers are taken from the element type of ``list[X]``,
    ``tuple[X, ...]`` or ``Sequence[X]`` annotations.
    """

    def implicit_property_identifier(
        self,
        container: ContainerInstance,
        owner: type[Any],
        name: str,
    ) -> Any | None:
        hint = property_hint(owner, name)
        return element_type(hint) if hint is not None else None

    def implicit_hint_identifier(self, hint: Any) -> Any | None:
        return element_type(hint)

    def resolve(self, container: ContainerInstance, identifier: Any) -> list[Any]:
        return container.get_many(identifier)


def _constructor_hints(target: type[Any]) -> dict[str, Any]:
    init_func = target.__init__
    try:
        return get_type_hints(init_func, include_extras=True)
    except (NameError, TypeError):
        # Forward references that cannot be evaluated yet; keep the annotations
        # that are already objects.
        annotations = inspect.get_annotations(init_func) if inspect.isfunction(init_func) else {}
        return {name: hint for name, hint in annotations.items() if not isinstance(hint, str)}


def parameter_handlers(target: type[Any]) -> list[Handler]:
    """Return one handler per ``__init__`` parameter carrying ``Inject`` metadata."""
    hints = _constructor_hints(target)
    handlers: list[Handler] = []
    for index, parameter in enumerate(injectable_parameters(target)):
        hint = hints.get(parameter.name)
        if get_origin(hint) is not Annotated:
            continue
        inner, *metadata = get_args(hint)
        for marker in metadata:
            if isinstance(marker, Inject):
                handlers.append(marker.parameter_handler(target, index, parameter.name, inner))
                break
    return handlers


@overload
def service(target: C, /) -> C: ...


@overload
def service(
    target: str | Token[Any] | None = None,
    /,
    *,
    id: Any = _UNSET,  # noqa: A002
    factory: ServiceFactory | None = None,
    multiple: bool = False,
    singleton: bool = False,
    eager: bool = False,
    transient: bool = False,
    container: ContainerInstance | None = None,
) -> Callable[[C], C]: ...


def service(  # noqa: PLR0913
    target: Any = None,
    /,
    *,
    id: Any = _UNSET,  # noqa: A002
    factory: ServiceFactory | None = None,
    multiple: bool = False,
    singleton: bool = False,
    eager: bool = False,
    transient: bool = False,
    container: ContainerInstance | None = None,
) -> Any:
    """Register the decorated class as a service.

    Used bare (``@service``) the class is registered under itself. A string or
    ``Token`` positional argument becomes the service id. Parameters of
    ``__init__`` annotated with ``Annotated[X, Inject(...)]`` get a parameter
    handler each.

    Args:
        target: The decorated class in bare form, or a string/``Token`` id.
        id: Service id; defaults to the class.
        factory: Factory used instead of the constructor.
        multiple: Register as one of several implementations of ``id``.
        singleton: Share one instance across all containers.
        eager: Build the instance at registration time.
        transient: Build a new instance on every request; wins over
            ``singleton``.
        container: Container to register into; defaults to the default
            container of the current registry.

    Returns:
        The decorated class in bare form, or a class decorator.

    Examples:
        .. code-block:: python

            @service
            class Engine: ...


            @service("car", transient=True)
            class Car:
                def __init__(self, engine: Engine) -> None:
                    self.engine = engine

    """
    if is_runtime_class(target):
        return _register_service(target, service_id=_UNSET, factory=None, scope=ServiceScope.CONTAINER)

    if target is not None:
        id = target  # noqa: A001

    if transient:
        scope = ServiceScope.TRANSIENT
    elif singleton:
        scope = ServiceScope.SINGLETON
    else:
        scope = ServiceScope.CONTAINER

    def decorator(decorated: C) -> C:
        return _register_service(
            decorated,
            service_id=id,
            factory=factory,
            scope=scope,
            multiple=multiple,
            eager=eager,
            container=container,
        )

    return decorator


def _register_service(  # noqa: PLR0913
    target: C,
    *,
    service_id: Any,
    factory: ServiceFactory | None,
    scope: ServiceScope,
    multiple: bool = False,
    eager: bool = False,
    container: ContainerInstance | None = None,
) -> C:
    target_container = container or get_default_container()
    for handler in parameter_handlers(target):
        target_container.register_handler(handler)

    target_container.set(
        target if service_id is _UNSET else service_id,
        type=target,
        factory=factory,
        scope=scope,
        multiple=multiple,
        eager=eager,
    )
    return target


__all__ = ["Inject", "InjectMany", "parameter_handlers", "service"]
