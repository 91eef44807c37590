"""
bootstrap/assembler.py - Kernel service assembly

Builds, but does not start, the services of one kernel instance:

1. The runtime context is populated from the kernel properties and the
   connection file, before any service exists.
2. Built-in services are registered: context, logging, heartbeat, shell.
3. Kernel-supplied configure callbacks run afterwards, so they may
   replace any built-in registration.
4. Every service is constructed, surfacing construction errors before any
   socket is bound.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple, Union
import logging

from kernelhost.core.connection import ConnectionDescriptor
from kernelhost.core.context import KernelContext
from kernelhost.core.properties import KernelProperties
from kernelhost.errors import MissingExecutionEngine
from kernelhost.kernel.heartbeat import ZmqHeartbeatServer
from kernelhost.kernel.logging_service import ConsoleLoggingService
from kernelhost.kernel.services import (
    ExecutionEngine,
    HeartbeatServer,
    LoggingService,
    ShellServer,
)
from kernelhost.kernel.shell import ZmqShellServer
from .container import Container, ServiceCollection

logger = logging.getLogger("bootstrap.assembler")

ConfigureServices = Callable[[ServiceCollection], None]


@dataclass
class ServiceGraph:
    """Constructed-but-not-started services of one kernel instance."""

    context: KernelContext
    logging: LoggingService
    engine: ExecutionEngine
    heartbeat: HeartbeatServer
    shell: ShellServer
    container: Container

    def startup_order(self) -> List[Tuple[str, object]]:
        """Services in the order they must be started."""
        return [
            ("execution engine", self.engine),
            ("heartbeat", self.heartbeat),
            ("shell", self.shell),
        ]


def register_builtin_services(services: ServiceCollection, context: KernelContext) -> ServiceCollection:
    """Register the services every kernel gets."""
    return (
        services
        .add_instance(KernelContext, context)
        .add_singleton(LoggingService, ConsoleLoggingService)
        .add_singleton(HeartbeatServer, ZmqHeartbeatServer)
        .add_singleton(ShellServer, ZmqShellServer)
    )


def _callbacks(configure: Union[ConfigureServices, Iterable[ConfigureServices], None]) -> List[ConfigureServices]:
    if configure is None:
        return []
    if callable(configure):
        return [configure]
    return list(configure)


def assemble_services(
    properties: KernelProperties,
    connection: ConnectionDescriptor,
    log_level: str = "ERROR",
    configure: Union[ConfigureServices, Iterable[ConfigureServices], None] = None,
) -> ServiceGraph:
    """
    Assemble the services of one kernel instance.

    Args:
        properties: Kernel identity
        connection: Loaded connection file
        log_level: Minimum severity for the logging service
        configure: Callback(s) registering the execution engine and any
            overrides; applied after the built-in services

    Returns:
        ServiceGraph ready for the startup sequencer

    Raises:
        MissingExecutionEngine: If no callback registered an ExecutionEngine
    """
    context = KernelContext().populate(properties, connection)

    services = register_builtin_services(ServiceCollection(), context)
    for callback in _callbacks(configure):
        callback(services)

    if not services.is_registered(ExecutionEngine):
        raise MissingExecutionEngine(
            f"Kernel {properties.kernel_name!r} did not register an ExecutionEngine"
        )

    container = services.build()

    logging_service = container.resolve(LoggingService)
    logging_service.set_min_level(log_level)

    graph = ServiceGraph(
        context=container.resolve(KernelContext),
        logging=logging_service,
        engine=container.resolve(ExecutionEngine),
        heartbeat=container.resolve(HeartbeatServer),
        shell=container.resolve(ShellServer),
        container=container,
    )
    logger.debug(f"Assembled {len(services)} service registrations for {properties.kernel_name}")
    return graph
