"""Tests for services registered with multiple=True."""

import pytest

from wirebox import (
    ContainerInstance,
    MultipleServicesError,
    ServiceNotFoundError,
    ServiceScope,
    Token,
)


class Plugin:
    """Base class of the plugin implementations."""


class AuthPlugin(Plugin):
    pass


class CachePlugin(Plugin):
    pass


class MetricsPlugin(Plugin):
    pass


PLUGINS: Token[Plugin] = Token("plugins")


class TestGetMany:
    """Tests for reading multi-services back."""

    def test_values_come_back_in_registration_order(self, container: ContainerInstance) -> None:
        """get_many() returns one instance per registration, in order."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)
        container.set(PLUGINS, type=CachePlugin, multiple=True)
        container.set(PLUGINS, type=MetricsPlugin, multiple=True)

        plugins = container.get_many(PLUGINS)

        assert [type(plugin) for plugin in plugins] == [AuthPlugin, CachePlugin, MetricsPlugin]

    def test_values_are_cached(self, container: ContainerInstance) -> None:
        """Container-scoped implementations are built once per container."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)

        assert container.get_many(PLUGINS)[0] is container.get_many(PLUGINS)[0]

    def test_plain_values(self, container: ContainerInstance) -> None:
        """Ready-made values can be registered as multiple."""
        container.set("ports", 80, multiple=True)
        container.set("ports", 443, multiple=True)

        assert container.get_many("ports") == [80, 443]

    def test_get_on_multiple_id_raises(self, container: ContainerInstance) -> None:
        """get() refuses identifiers that hold several services."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)

        with pytest.raises(MultipleServicesError, match="get_many"):
            container.get(PLUGINS)

    def test_get_on_multiple_id_from_child_raises(
        self,
        container: ContainerInstance,
        child: ContainerInstance,
    ) -> None:
        """get() from a child also refuses multi-service ids of the default container."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)

        with pytest.raises(MultipleServicesError):
            child.get(PLUGINS)

    def test_unknown_id_raises(self, container: ContainerInstance) -> None:
        """get_many() on an unknown id raises ServiceNotFoundError."""
        with pytest.raises(ServiceNotFoundError):
            container.get_many(PLUGINS)

    def test_has_reports_multiple_id(self, container: ContainerInstance) -> None:
        """has() is true for multi-service ids."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)

        assert container.has(PLUGINS)


class TestMultipleScopes:
    """Tests for multi-services across containers."""

    def test_container_scope_is_per_container(
        self,
        container: ContainerInstance,
        child: ContainerInstance,
    ) -> None:
        """Children build their own instances from the default registrations."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)
        container.set(PLUGINS, type=CachePlugin, multiple=True)

        default_plugins = container.get_many(PLUGINS)
        child_plugins = child.get_many(PLUGINS)

        assert [type(plugin) for plugin in child_plugins] == [AuthPlugin, CachePlugin]
        assert all(
            mine is not theirs for mine, theirs in zip(child_plugins, default_plugins, strict=True)
        )
        assert child.has(PLUGINS)

    def test_singleton_is_shared(
        self,
        container: ContainerInstance,
        child: ContainerInstance,
    ) -> None:
        """Singleton multi-services registered from a child are shared."""
        child.set(PLUGINS, type=AuthPlugin, multiple=True, scope=ServiceScope.SINGLETON)

        assert not child.has(PLUGINS)
        assert child.get_many(PLUGINS) == container.of("other").get_many(PLUGINS)
        assert child.get_many(PLUGINS)[0] is container.get_many(PLUGINS)[0]

    def test_transient(self, container: ContainerInstance) -> None:
        """Transient implementations are rebuilt on every call."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True, scope=ServiceScope.TRANSIENT)

        assert container.get_many(PLUGINS)[0] is not container.get_many(PLUGINS)[0]


class TestRemoveMultiple:
    """Tests for removing multi-services."""

    def test_remove_drops_every_implementation(self, container: ContainerInstance) -> None:
        """Removing a multi-service id removes all of its implementations."""
        container.set(PLUGINS, type=AuthPlugin, multiple=True)
        container.set(PLUGINS, type=CachePlugin, multiple=True)

        container.remove(PLUGINS)

        assert not container.has(PLUGINS)
        with pytest.raises(ServiceNotFoundError):
            container.get_many(PLUGINS)
