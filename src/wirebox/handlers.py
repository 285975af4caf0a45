from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from wirebox.exceptions import InvalidHandlerError

if TYPE_CHECKING:
    from wirebox.container_instance import ContainerInstance


@dataclass(frozen=True, slots=True)
class Handler:
    """Override for one constructor parameter or one property of a class.

    The container calls ``value_provider`` with the container that requested
    the value and injects the result instead of resolving the captured type.

    Examples:
        .. code-block:: python

            container.register_handler(
                Handler(
                    target_type=Car,
                    parameter_index=0,
                    value_provider=lambda c: c.get("engine"),
                ),
            )

    """

    target_type: type[Any]
    value_provider: Callable[[ContainerInstance], Any]
    property_name: str | None = None
    parameter_index: int | None = None

    def __post_init__(self) -> None:
        if (self.property_name is None) == (self.parameter_index is None):
            msg = (
                f"Handler for {self.target_type!r} must set exactly one of "
                "'property_name' and 'parameter_index'."
            )
            raise InvalidHandlerError(msg)

    @property
    def is_property_handler(self) -> bool:
        return self.property_name is not None

    def matches_parameter(self, target: type[Any], index: int) -> bool:
        return self.parameter_index == index and self.target_type is target
