from __future__ import annotations

from collections.abc import Iterator

import pytest

from wirebox.container_instance import ContainerInstance
from wirebox.container_registry import ContainerRegistry, registry_context


@pytest.fixture()
def wirebox_registry() -> Iterator[ContainerRegistry]:
    """Provide a fresh registry that is current for the duration of one test.

    Classes decorated with ``@service`` or using ``Inject`` inside the test
    register into this registry's default container. The registry is disposed
    and the previous one restored when the test finishes.

    Yields:
        A new ``ContainerRegistry`` bound through ``registry_context``.

    """
    registry = ContainerRegistry()
    with registry_context.use(registry):
        yield registry
    registry.dispose()


@pytest.fixture()
def wirebox_container(wirebox_registry: ContainerRegistry) -> ContainerInstance:
    """Return the default container of the per-test registry."""
    return wirebox_registry.default_container
