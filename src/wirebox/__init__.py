from wirebox.container_cluster import ContainerCluster
from wirebox.container_instance import ContainerInstance, ResetStrategy
from wirebox.container_registry import (
    DEFAULT_CONTAINER_ID,
    ContainerRegistry,
    RegistryContext,
    get_default_container,
    registry_context,
)
from wirebox.exceptions import (
    CannotInjectValueError,
    CannotInstantiateValueError,
    CannotRegisterContainerError,
    ContainerDisposedError,
    ContainerNotFoundError,
    InvalidHandlerError,
    InvalidServiceOptionsError,
    MultipleServicesError,
    ServiceNotFoundError,
    WireboxError,
)
from wirebox.handlers import Handler
from wirebox.lazy import LazyReference, lazy
from wirebox.markers import Inject, InjectMany, service
from wirebox.metadata import EMPTY, ServiceMetadata, ServiceScope
from wirebox.token import Token
from wirebox.type_provider import AnnotationTypeProvider, ParameterType, TypeProvider

__all__ = [
    "DEFAULT_CONTAINER_ID",
    "EMPTY",
    "AnnotationTypeProvider",
    "CannotInjectValueError",
    "CannotInstantiateValueError",
    "CannotRegisterContainerError",
    "ContainerCluster",
    "ContainerDisposedError",
    "ContainerInstance",
    "ContainerNotFoundError",
    "ContainerRegistry",
    "Handler",
    "Inject",
    "InjectMany",
    "InvalidHandlerError",
    "InvalidServiceOptionsError",
    "LazyReference",
    "MultipleServicesError",
    "ParameterType",
    "RegistryContext",
    "ResetStrategy",
    "ServiceMetadata",
    "ServiceNotFoundError",
    "ServiceScope",
    "Token",
    "TypeProvider",
    "WireboxError",
    "get_default_container",
    "lazy",
    "registry_context",
    "service",
]
