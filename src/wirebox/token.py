from __future__ import annotations

from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Token(Generic[T]):
    """Identity-unique service identifier.

    Use a token when a string is not unique enough or when the service is
    described by a protocol that has no useful runtime class. Two tokens are
    equal only when they are the same object; the name is for debugging.

    Examples:
        .. code-block:: python

            Clock = Token["ClockProtocol"]("clock")
            container.set(Clock, value=SystemClock())

    """

    __slots__ = ("_name",)

    def __init__(self, name: str | None = None) -> None:
        object.__setattr__(self, "_name", name)

    @property
    def name(self) -> str | None:
        return self._name

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "Token is immutable."
        raise AttributeError(msg)

    def __repr__(self) -> str:
        return f"Token<{self._name or 'UNSET_NAME'}>"
