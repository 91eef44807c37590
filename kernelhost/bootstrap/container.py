"""
bootstrap/container.py - Service container

Explicit registration table keyed by capability type. Later registrations
of the same capability replace earlier ones, so a kernel can override a
built-in service by registering its own implementation.

Constructor parameters annotated with a registered capability are resolved
from the container; parameters with defaults are left to their defaults.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
from enum import Enum
import inspect
import logging
import threading

logger = logging.getLogger("bootstrap.container")

T = TypeVar('T')


class Lifecycle(Enum):
    """Service lifecycle modes."""
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass
class ServiceDescriptor:
    """Describes a registered service."""

    service_type: Type
    implementation: Optional[Type] = None
    factory: Optional[Callable] = None
    instance: Any = None
    lifecycle: Lifecycle = Lifecycle.SINGLETON


class CircularDependencyError(Exception):
    """Raised when a circular dependency is detected."""
    pass


class ServiceNotFoundError(Exception):
    """Raised when a service is not registered."""
    pass


class Container:
    """
    Service container with singleton and transient lifecycles.

    Features:
    - Circular dependency detection
    - Factory function support
    - Instance registration
    """

    def __init__(self):
        self._services: Dict[Type, ServiceDescriptor] = {}
        self._resolving: List[Type] = []
        self._lock = threading.RLock()

    def register(
        self,
        service_type: Type[T],
        implementation: Type[T] = None,
        lifecycle: Lifecycle = Lifecycle.SINGLETON,
    ) -> "Container":
        """
        Register a service type with implementation.

        Args:
            service_type: The capability type
            implementation: The implementation class
            lifecycle: Service lifecycle

        Returns:
            Self for chaining
        """
        with self._lock:
            self._services[service_type] = ServiceDescriptor(
                service_type=service_type,
                implementation=implementation or service_type,
                lifecycle=lifecycle,
            )
        return self

    def register_factory(
        self,
        service_type: Type[T],
        factory: Callable[..., T],
        lifecycle: Lifecycle = Lifecycle.SINGLETON,
    ) -> "Container":
        """Register a service with a factory function."""
        with self._lock:
            self._services[service_type] = ServiceDescriptor(
                service_type=service_type,
                factory=factory,
                lifecycle=lifecycle,
            )
        return self

    def register_instance(
        self,
        service_type: Type[T],
        instance: T,
    ) -> "Container":
        """Register an existing instance as singleton."""
        with self._lock:
            self._services[service_type] = ServiceDescriptor(
                service_type=service_type,
                instance=instance,
                lifecycle=Lifecycle.SINGLETON,
            )
        return self

    def resolve(self, service_type: Type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            ServiceNotFoundError: If service not registered
            CircularDependencyError: If circular dependency detected
        """
        with self._lock:
            if service_type not in self._services:
                raise ServiceNotFoundError(f"Service not registered: {_type_name(service_type)}")

            descriptor = self._services[service_type]

            if descriptor.lifecycle == Lifecycle.SINGLETON and descriptor.instance is not None:
                return descriptor.instance

            if service_type in self._resolving:
                chain = " -> ".join(_type_name(t) for t in self._resolving)
                raise CircularDependencyError(
                    f"Circular dependency detected: {chain} -> {_type_name(service_type)}"
                )

            self._resolving.append(service_type)
            try:
                instance = self._create_instance(descriptor)
                if descriptor.lifecycle == Lifecycle.SINGLETON:
                    descriptor.instance = instance
                logger.debug(f"Resolved {_type_name(service_type)}")
                return instance
            finally:
                self._resolving.remove(service_type)

    def _create_instance(self, descriptor: ServiceDescriptor) -> Any:
        if descriptor.factory is not None:
            return self._call_with_dependencies(descriptor.factory)

        if descriptor.implementation is not None:
            return self._call_with_dependencies(descriptor.implementation)

        raise ServiceNotFoundError(
            f"No implementation or factory for {_type_name(descriptor.service_type)}"
        )

    def _call_with_dependencies(self, callable_obj: Callable) -> Any:
        """Call a constructor/factory with resolved dependencies."""
        sig = inspect.signature(callable_obj, eval_str=True)
        kwargs = {}

        for param_name, param in sig.parameters.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            if param.annotation in self._services:
                kwargs[param_name] = self.resolve(param.annotation)
            elif param.default is param.empty:
                raise ServiceNotFoundError(
                    f"Cannot resolve parameter {param_name!r} of {_type_name(callable_obj)}"
                )

        return callable_obj(**kwargs)

    def is_registered(self, service_type: Type) -> bool:
        """Check if a service type is registered."""
        return service_type in self._services

    def get_all_registered(self) -> List[Type]:
        """Get all registered service types."""
        return list(self._services.keys())


class ServiceCollection:
    """
    Builder for configuring services before building container.

    Provides a fluent API for service registration.
    """

    def __init__(self):
        self._registrations: List[ServiceDescriptor] = []

    def add_singleton(
        self,
        service_type: Type[T],
        implementation: Type[T] = None,
    ) -> "ServiceCollection":
        """Add a singleton service."""
        self._registrations.append(ServiceDescriptor(
            service_type=service_type,
            implementation=implementation or service_type,
            lifecycle=Lifecycle.SINGLETON,
        ))
        return self

    def add_transient(
        self,
        service_type: Type[T],
        implementation: Type[T] = None,
    ) -> "ServiceCollection":
        """Add a transient service."""
        self._registrations.append(ServiceDescriptor(
            service_type=service_type,
            implementation=implementation or service_type,
            lifecycle=Lifecycle.TRANSIENT,
        ))
        return self

    def add_factory(
        self,
        service_type: Type[T],
        factory: Callable[..., T],
        lifecycle: Lifecycle = Lifecycle.SINGLETON,
    ) -> "ServiceCollection":
        """Add a service with factory."""
        self._registrations.append(ServiceDescriptor(
            service_type=service_type,
            factory=factory,
            lifecycle=lifecycle,
        ))
        return self

    def add_instance(
        self,
        service_type: Type[T],
        instance: T,
    ) -> "ServiceCollection":
        """Add an existing instance."""
        self._registrations.append(ServiceDescriptor(
            service_type=service_type,
            instance=instance,
            lifecycle=Lifecycle.SINGLETON,
        ))
        return self

    def is_registered(self, service_type: Type) -> bool:
        return any(d.service_type is service_type for d in self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    def build(self) -> Container:
        """Build the container from registrations, in registration order."""
        container = Container()
        container.register_instance(Container, container)

        for descriptor in self._registrations:
            if descriptor.instance is not None:
                container.register_instance(descriptor.service_type, descriptor.instance)
            elif descriptor.factory is not None:
                container.register_factory(
                    descriptor.service_type,
                    descriptor.factory,
                    descriptor.lifecycle,
                )
            else:
                container.register(
                    descriptor.service_type,
                    descriptor.implementation,
                    descriptor.lifecycle,
                )

        return container


def _type_name(obj: Any) -> str:
    return getattr(obj, "__name__", repr(obj))
