"""Shared pytest fixtures for wirebox tests."""

from collections.abc import Iterator

import pytest

from wirebox import ContainerInstance, ContainerRegistry, registry_context


@pytest.fixture()
def registry() -> Iterator[ContainerRegistry]:
    """Fresh registry bound as the current one for the test."""
    registry = ContainerRegistry()
    with registry_context.use(registry):
        yield registry


@pytest.fixture()
def container(registry: ContainerRegistry) -> ContainerInstance:
    """Default container of the per-test registry."""
    return registry.default_container


@pytest.fixture()
def child(container: ContainerInstance) -> ContainerInstance:
    """Registered child container created from the default container."""
    return container.of("child")
