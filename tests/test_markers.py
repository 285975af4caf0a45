"""Tests for the @service decorator and the Inject/InjectMany markers.

Classes are declared inside the tests: markers register into the default
container of the current registry when the class is created, and the
``container`` fixture swaps in a fresh registry per test.
"""

from typing import Annotated

import pytest

from wirebox import (
    CannotInjectValueError,
    ContainerInstance,
    Inject,
    InjectMany,
    Token,
    lazy,
    service,
)


class TestServiceDecorator:
    """Tests for @service registration options."""

    def test_bare_decorator(self, container: ContainerInstance) -> None:
        """Bare @service registers the class under itself."""

        @service
        class Engine:
            pass

        assert container.has(Engine)
        assert isinstance(container.get(Engine), Engine)

    def test_string_id(self, container: ContainerInstance) -> None:
        """A positional string becomes the service id."""

        @service("engine")
        class Engine:
            pass

        assert isinstance(container.get("engine"), Engine)
        assert not container.has(Engine)

    def test_token_id(self, container: ContainerInstance) -> None:
        """Tokens can be used as ids."""
        engine_token: Token[object] = Token("engine")

        @service(engine_token)
        class Engine:
            pass

        assert isinstance(container.get(engine_token), Engine)

    def test_decorator_returns_class(self, container: ContainerInstance) -> None:
        """The decorator returns the class unchanged."""

        class Engine:
            pass

        assert service(Engine) is Engine
        assert service(id="engine")(Engine) is Engine

    def test_singleton(self, container: ContainerInstance) -> None:
        """singleton=True shares one instance across containers."""

        @service(singleton=True)
        class Engine:
            pass

        assert container.of("a").get(Engine) is container.of("b").get(Engine)

    def test_transient_wins_over_singleton(self, container: ContainerInstance) -> None:
        """transient=True takes precedence over singleton=True."""

        @service(singleton=True, transient=True)
        class Engine:
            pass

        assert container.get(Engine) is not container.get(Engine)

    def test_factory(self, container: ContainerInstance) -> None:
        """A factory replaces the constructor."""

        @service(factory=lambda _container, _id: Engine(horsepower=300))
        class Engine:
            def __init__(self, horsepower: int = 100) -> None:
                self.horsepower = horsepower

        assert container.get(Engine).horsepower == 300

    def test_multiple(self, container: ContainerInstance) -> None:
        """multiple=True collects implementations under one id."""
        handlers: Token[object] = Token("handlers")

        @service(id=handlers, multiple=True)
        class First:
            pass

        @service(id=handlers, multiple=True)
        class Second:
            pass

        assert [type(value) for value in container.get_many(handlers)] == [First, Second]

    def test_eager(self, container: ContainerInstance) -> None:
        """eager=True builds the instance at decoration time."""
        created: list[object] = []

        @service(eager=True)
        class Engine:
            def __init__(self) -> None:
                created.append(self)

        assert len(created) == 1
        assert container.get(Engine) is created[0]

    def test_explicit_container(
        self,
        container: ContainerInstance,
        child: ContainerInstance,
    ) -> None:
        """container= registers into the given container."""

        @service(container=child)
        class Engine:
            pass

        assert child.has(Engine)
        assert not container.has(Engine)


class TestInjectProperty:
    """Tests for Inject used as a class attribute."""

    def test_implicit_identifier_from_annotation(self, container: ContainerInstance) -> None:
        """The attribute annotation is used as identifier."""

        @service
        class Engine:
            pass

        @service
        class Car:
            engine: Engine = Inject()

        assert container.get(Car).engine is container.get(Engine)

    def test_explicit_identifiers(self, container: ContainerInstance) -> None:
        """Strings, tokens and thunks work as explicit identifiers."""
        color_token: Token[str] = Token("color")
        container.set("plate", "AB-123")
        container.set(color_token, "red")

        @service
        class Engine:
            pass

        @service
        class Car:
            plate = Inject("plate")
            color = Inject(color_token)
            engine = Inject(lambda: Engine)

        car = container.get(Car)

        assert car.plate == "AB-123"
        assert car.color == "red"
        assert car.engine is container.get(Engine)

    def test_property_on_class_access_returns_marker(self, container: ContainerInstance) -> None:
        """Accessing the attribute on the class returns the marker."""

        class Car:
            plate = Inject("plate")

        assert isinstance(Car.plate, Inject)

    def test_uninjected_instance_raises_attribute_error(
        self,
        container: ContainerInstance,
    ) -> None:
        """Instances built outside a container have no injected value."""

        class Car:
            plate = Inject("plate")

        with pytest.raises(AttributeError, match="plate"):
            Car().plate  # noqa: B018

    def test_missing_identifier_raises(self, container: ContainerInstance) -> None:
        """A marker without identifier or annotation cannot be injected."""

        @service
        class Car:
            plate = Inject()

        with pytest.raises(CannotInjectValueError, match="Car.plate"):
            container.get(Car)

    def test_object_annotation_raises(self, container: ContainerInstance) -> None:
        """object carries no identifier information."""

        @service
        class Car:
            plate: object = Inject()

        with pytest.raises(CannotInjectValueError):
            container.get(Car)

    def test_explicit_container(
        self,
        container: ContainerInstance,
        child: ContainerInstance,
    ) -> None:
        """Inject(container=...) registers its handler on that container only."""
        child.set("plate", "CHILD")
        container.set("plate", "DEFAULT")

        @service
        class Car:
            plate = Inject("plate", container=child)

        assert child.get(Car).plate == "CHILD"
        assert not hasattr(container.get(Car), "plate")


class TestInjectParameter:
    """Tests for Inject used as Annotated metadata of __init__ parameters."""

    def test_explicit_identifier(self, container: ContainerInstance) -> None:
        """The marker identifier replaces the annotated type."""

        class Engine:
            def __init__(self, model: str = "standard") -> None:
                self.model = model

        container.set(Engine)
        container.set("turbo", Engine("turbo"))

        @service
        class Car:
            def __init__(self, engine: Annotated[Engine, Inject("turbo")]) -> None:
                self.engine = engine

        assert container.get(Car).engine.model == "turbo"

    def test_implicit_identifier(self, container: ContainerInstance) -> None:
        """Without identifier the annotated type is used."""

        @service
        class Engine:
            pass

        @service
        class Car:
            def __init__(self, engine: Annotated[Engine, Inject()]) -> None:
                self.engine = engine

        assert container.get(Car).engine is container.get(Engine)

    def test_markers_need_service_decorator(self, container: ContainerInstance) -> None:
        """Classes registered with set() resolve the annotated type instead."""

        @service
        class Engine:
            def __init__(self, model: str = "standard") -> None:
                self.model = model

        container.set("turbo", Engine("turbo"))

        class Car:
            def __init__(self, engine: Annotated[Engine, Inject("turbo")]) -> None:
                self.engine = engine

        container.set(Car)

        assert container.get(Car).engine is container.get(Engine)
        assert container.get(Car).engine.model == "standard"


class TestInjectMany:
    """Tests for InjectMany."""

    def test_property_element_type(self, container: ContainerInstance) -> None:
        """list[X] annotations inject every implementation of X."""

        class Plugin:
            pass

        @service(id=Plugin, multiple=True)
        class AuthPlugin(Plugin):
            pass

        @service(id=Plugin, multiple=True)
        class CachePlugin(Plugin):
            pass

        @service
        class App:
            plugins: list[Plugin] = InjectMany()

        assert [type(plugin) for plugin in container.get(App).plugins] == [
            AuthPlugin,
            CachePlugin,
        ]

    def test_parameter_with_token(self, container: ContainerInstance) -> None:
        """InjectMany works as parameter metadata with an explicit token."""
        port_token: Token[int] = Token("ports")
        container.set(port_token, 80, multiple=True)
        container.set(port_token, 443, multiple=True)

        @service
        class Server:
            def __init__(self, ports: Annotated[list[int], InjectMany(port_token)]) -> None:
                self.ports = ports

        assert container.get(Server).ports == [80, 443]


class TestLazy:
    """Tests for lazy() references and cyclic properties."""

    def test_cyclic_properties(self, container: ContainerInstance) -> None:
        """Two services can reference each other through lazy properties."""

        @service
        class Chicken:
            egg = Inject(lazy(lambda: Egg))

        @service
        class Egg:
            chicken = Inject(lazy(lambda: Chicken))

        chicken = container.get(Chicken)

        assert chicken.egg.chicken is chicken
        assert container.get(Egg).chicken is chicken

    def test_cycle_in_new_container(self, container: ContainerInstance) -> None:
        """The cycle resolves per container for containers created afterwards."""

        @service
        class Chicken:
            egg = Inject(lazy(lambda: Egg))

        @service
        class Egg:
            chicken = Inject(lazy(lambda: Chicken))

        farm = container.of("farm")
        chicken = farm.get(Chicken)

        assert chicken.egg.chicken is chicken
        assert chicken is not container.get(Chicken)

    def test_lazy_reference_defers_evaluation(self) -> None:
        """The thunk runs on get(), not on creation."""
        calls: list[int] = []
        reference = lazy(lambda: calls.append(1) or "engine")

        assert calls == []
        assert reference.get() == "engine"
        assert calls == [1]
