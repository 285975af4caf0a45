from __future__ import annotations

import inspect
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Protocol, get_args, get_origin, get_type_hints, runtime_checkable

from wirebox._internal.type_checks import is_runtime_class
from wirebox.exceptions import CannotInjectValueError

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_SEQUENCE_ORIGINS = (list, tuple, Sequence)


@dataclass(frozen=True, slots=True)
class ParameterType:
    """Captured information about one constructor parameter."""

    name: str
    index: int
    service_id: Any | None
    kind: inspect._ParameterKind
    has_default: bool

    @property
    def is_positional_only(self) -> bool:
        return self.kind is inspect.Parameter.POSITIONAL_ONLY


@runtime_checkable
class TypeProvider(Protocol):
    """Capture service identifiers for constructor parameters and properties.

    The container never inspects classes itself; it asks the registry's type
    provider. Implementations return ``None`` wherever no identifier can be
    captured, and the container then treats the member as a plain value.
    """

    def get_parameter_types(self, target: type[Any]) -> tuple[ParameterType, ...]: ...

    def lookup_property_type(self, target: type[Any], name: str) -> Any | None: ...


def strip_annotated(hint: Any) -> Any:
    """Return ``X`` for ``Annotated[X, ...]`` and ``hint`` otherwise."""
    if get_origin(hint) is Annotated:
        return get_args(hint)[0]
    return hint


def hint_to_identifier(hint: Any) -> Any | None:
    """Map a resolved type hint to a service identifier, or ``None``."""
    hint = strip_annotated(hint)
    if hint is Any or is_runtime_class(hint):
        return hint
    return None


def element_type(hint: Any) -> Any | None:
    """Return ``X`` for ``list[X]``, ``tuple[X, ...]`` or ``Sequence[X]``."""
    hint = strip_annotated(hint)
    if get_origin(hint) not in _SEQUENCE_ORIGINS:
        return None
    args = [arg for arg in get_args(hint) if arg is not Ellipsis]
    if len(args) != 1:
        return None
    return hint_to_identifier(args[0])


def injectable_parameters(target: Any) -> list[inspect.Parameter]:
    """Return the parameters of ``target`` that can be injected, in order.

    ``self``, ``*args`` and ``**kwargs`` are left out; the position in the
    returned list is the parameter index used by handlers.
    """
    try:
        signature = inspect.signature(target)
    except (ValueError, TypeError):
        return []
    return [
        parameter
        for parameter in signature.parameters.values()
        if parameter.kind not in _SKIPPED_KINDS
    ]


def property_hint(target: type[Any], name: str) -> Any | None:
    """Return the evaluated class-level annotation of ``name`` on ``target``."""
    try:
        hints = get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as error:
        raise CannotInjectValueError(target, name) from error
    return hints.get(name)


class AnnotationTypeProvider:
    """Type provider backed by ``typing.get_type_hints``.

    Constructor parameters are read from ``__init__`` annotations, properties
    from class annotations. ``Annotated[X, ...]`` is captured as ``X``. Hints
    that are not plain classes (unions, generic aliases) capture nothing.
    """

    def __init__(self) -> None:
        self._parameters_cache: dict[type[Any], tuple[ParameterType, ...]] = {}

    def get_parameter_types(self, target: type[Any]) -> tuple[ParameterType, ...]:
        """Return the injectable parameters of ``target`` in declaration order."""
        cached = self._parameters_cache.get(target)
        if cached is not None:
            return cached

        init_func = getattr(target, "__init__", None)
        try:
            type_hints = get_type_hints(init_func, include_extras=True) if init_func else {}
        except (NameError, TypeError) as error:
            raise CannotInjectValueError(target, "__init__") from error

        parameters = injectable_parameters(target)
        result = tuple(
            ParameterType(
                name=parameter.name,
                index=index,
                service_id=hint_to_identifier(type_hints[parameter.name])
                if parameter.name in type_hints
                else None,
                kind=parameter.kind,
                has_default=parameter.default is not inspect.Parameter.empty,
            )
            for index, parameter in enumerate(parameters)
        )
        self._parameters_cache[target] = result
        return result

    def lookup_parameter_type(self, target: type[Any], index: int) -> Any | None:
        """Return the identifier captured for parameter ``index`` of ``target``."""
        parameters = self.get_parameter_types(target)
        if 0 <= index < len(parameters):
            return parameters[index].service_id
        return None

    def lookup_property_type(self, target: type[Any], name: str) -> Any | None:
        """Return the identifier captured for the class attribute ``name``."""
        hint = property_hint(target, name)
        if hint is None:
            return None
        return hint_to_identifier(hint)


__all__ = [
    "AnnotationTypeProvider",
    "ParameterType",
    "TypeProvider",
    "element_type",
    "hint_to_identifier",
    "injectable_parameters",
    "property_hint",
    "strip_annotated",
]
