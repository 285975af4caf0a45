from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class LazyReference(Generic[T]):
    """Deferred service identifier.

    The wrapped thunk runs when the injected value is produced, not when the
    injection site is declared, so a class may refer to another class that is
    defined later in the module.
    """

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory

    def get(self) -> T:
        return self._factory()

    def __repr__(self) -> str:
        return f"LazyReference({self._factory!r})"


def lazy(factory: Callable[[], T]) -> LazyReference[T]:
    """Wrap a zero-argument thunk returning an identifier.

    Examples:
        .. code-block:: python

            class A:
                b = Inject(lazy(lambda: B))


            class B:
                a = Inject(lazy(lambda: A))

    """
    return LazyReference(factory)
