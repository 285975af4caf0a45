from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, TypeAlias


class _Empty(Enum):
    EMPTY = "EMPTY"

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY: Final = _Empty.EMPTY
"""Value of a service that has not been constructed yet (or is transient)."""


class ServiceScope(str, Enum):
    """Defines where a service value is stored and how long it is reused."""

    CONTAINER = "container"
    """One instance per container that resolves the service."""

    SINGLETON = "singleton"
    """One instance per process, always stored in the default container."""

    TRANSIENT = "transient"
    """A new instance is created every time the service is requested."""


FactoryMethod: TypeAlias = tuple[Any, str]
"""``(factory_id, method_name)`` pair naming a method of another service."""

ServiceFactory: TypeAlias = Callable[..., Any] | FactoryMethod


@dataclass(kw_only=True, slots=True)
class ServiceMetadata:
    """State of one registered service.

    The record is mutable: registering the same id again updates it in place,
    and the container caches the produced value in ``value``.
    """

    id: Any
    scope: ServiceScope = ServiceScope.CONTAINER
    type: type[Any] | None = None
    factory: ServiceFactory | None = None
    value: Any = EMPTY
    multiple: bool = False
    eager: bool = False
    referenced_by: set[Any] = field(default_factory=set)

    @property
    def is_transient(self) -> bool:
        return self.scope is ServiceScope.TRANSIENT

    @property
    def has_value(self) -> bool:
        return self.value is not EMPTY

    @property
    def is_constructible(self) -> bool:
        """Return whether the container can (re)build the value on its own."""
        return self.type is not None or self.factory is not None


@dataclass(slots=True)
class MultiServiceEntry:
    """Masking entry: the generated tokens stored for one multi-service id."""

    scope: ServiceScope
    tokens: list[Any] = field(default_factory=list)
