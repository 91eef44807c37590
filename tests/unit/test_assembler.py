"""
tests/unit/test_assembler.py - Service assembly tests.
"""

import logging
from unittest.mock import Mock

import pytest

from kernelhost.bootstrap.assembler import ServiceGraph, assemble_services
from kernelhost.bootstrap.container import ServiceCollection
from kernelhost.core import ConnectionDescriptor, KernelContext
from kernelhost.errors import MissingExecutionEngine
from kernelhost.kernel import (
    ConsoleLoggingService,
    ExecutionEngine,
    HeartbeatServer,
    LoggingService,
    ShellServer,
    ZmqHeartbeatServer,
    ZmqShellServer,
)
from kernelhost.kernel.echo import EchoEngine

from tests.conftest import connection_data


class NoOpEngine(ExecutionEngine):
    def start(self):
        pass


class ContextReadingEngine(ExecutionEngine):
    """Reads connection parameters at construction time."""

    def __init__(self, context: KernelContext):
        self.shell_port = context.connection.shell_port

    def start(self):
        pass


class CustomHeartbeat(HeartbeatServer):
    def start(self):
        pass


@pytest.fixture
def connection():
    return ConnectionDescriptor(**connection_data())


def register_engine(engine_type=NoOpEngine):
    return lambda services: services.add_singleton(ExecutionEngine, engine_type)


class TestAssembleServices:
    """Tests for assemble_services."""

    def test_builds_graph(self, demo_properties, connection):
        graph = assemble_services(demo_properties, connection, "ERROR", register_engine())

        assert isinstance(graph, ServiceGraph)
        assert isinstance(graph.engine, NoOpEngine)
        assert isinstance(graph.heartbeat, ZmqHeartbeatServer)
        assert isinstance(graph.shell, ZmqShellServer)
        assert isinstance(graph.logging, ConsoleLoggingService)

    def test_context_populated_before_construction(self, demo_properties, connection):
        graph = assemble_services(demo_properties, connection, "ERROR", register_engine(ContextReadingEngine))

        assert graph.context.is_populated
        assert graph.context.properties is demo_properties
        assert graph.engine.shell_port == 50002

    def test_services_are_singletons(self, demo_properties, connection):
        graph = assemble_services(demo_properties, connection, "ERROR", register_engine(EchoEngine))

        assert graph.engine.shell is graph.shell
        assert graph.container.resolve(ShellServer) is graph.shell
        assert graph.container.resolve(KernelContext) is graph.context

    def test_nothing_started(self, demo_properties, connection):
        graph = assemble_services(demo_properties, connection, "ERROR", register_engine())

        assert not graph.heartbeat.is_running
        assert not graph.shell.is_running
        assert graph.heartbeat.endpoint is None

    def test_sets_min_log_level(self, demo_properties, connection):
        graph = assemble_services(demo_properties, connection, "warning", register_engine())

        assert graph.logging.min_level == "WARNING"
        assert logging.getLogger().level == logging.WARNING

    def test_collaborator_overrides_builtin(self, demo_properties, connection):
        def configure(services: ServiceCollection):
            services.add_singleton(ExecutionEngine, NoOpEngine)
            services.add_singleton(HeartbeatServer, CustomHeartbeat)

        graph = assemble_services(demo_properties, connection, "ERROR", configure)

        assert isinstance(graph.heartbeat, CustomHeartbeat)

    def test_multiple_callbacks_apply_in_order(self, demo_properties, connection):
        custom_logging = Mock(spec=LoggingService)
        callbacks = [
            register_engine(),
            lambda services: services.add_instance(LoggingService, custom_logging),
        ]

        graph = assemble_services(demo_properties, connection, "INFO", callbacks)

        assert graph.logging is custom_logging
        custom_logging.set_min_level.assert_called_once_with("INFO")

    def test_startup_order(self, demo_properties, connection):
        graph = assemble_services(demo_properties, connection, "ERROR", register_engine())

        names = [name for name, _ in graph.startup_order()]
        assert names == ["execution engine", "heartbeat", "shell"]

    def test_construction_error_surfaces(self, demo_properties):
        bad = ConnectionDescriptor(**connection_data(signature_scheme="rot13"))

        with pytest.raises(Exception):
            assemble_services(demo_properties, bad, "ERROR", register_engine())


class TestMissingExecutionEngine:
    """MissingExecutionEngine is raised if and only if no engine is registered."""

    def test_no_callbacks(self, demo_properties, connection):
        with pytest.raises(MissingExecutionEngine):
            assemble_services(demo_properties, connection, "ERROR")

    def test_many_callbacks_without_engine(self, demo_properties, connection):
        callbacks = [
            lambda services: services.add_singleton(HeartbeatServer, CustomHeartbeat),
            lambda services: services.add_instance(LoggingService, Mock(spec=LoggingService)),
            lambda services: None,
        ]

        with pytest.raises(MissingExecutionEngine) as exc_info:
            assemble_services(demo_properties, connection, "ERROR", callbacks)

        assert "demo" in str(exc_info.value)

    def test_engine_registered_by_instance(self, demo_properties, connection):
        engine = NoOpEngine()
        graph = assemble_services(
            demo_properties, connection, "ERROR",
            lambda services: services.add_instance(ExecutionEngine, engine),
        )
        assert graph.engine is engine
