from __future__ import annotations

import types
from typing import Any, TypeGuard

PRIMITIVE_LIKE_TYPES: frozenset[Any] = frozenset(
    {
        str,
        bytes,
        bool,
        int,
        float,
        complex,
        dict,
        list,
        tuple,
        set,
        frozenset,
        object,
        Any,
    },
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_primitive_like(candidate: object) -> bool:
    """Return true for plain value types that are never resolved as services."""
    try:
        return candidate in PRIMITIVE_LIKE_TYPES
    except TypeError:
        return False


def immediate_parent(target: type[Any]) -> type[Any] | None:
    """Return the direct base of ``target`` in its MRO, or ``None`` for ``object``."""
    mro = target.__mro__
    if len(mro) < 2:  # noqa: PLR2004
        return None
    return mro[1]


__all__ = ["PRIMITIVE_LIKE_TYPES", "immediate_parent", "is_primitive_like", "is_runtime_class"]
