"""
tests/unit/test_sequencer.py - Startup sequencing tests.
"""

from unittest.mock import Mock

import pytest

from kernelhost.bootstrap.assembler import ServiceGraph
from kernelhost.bootstrap.sequencer import EXIT_OK, SequencerState, StartupSequencer
from kernelhost.core import ConnectionDescriptor, KernelContext
from kernelhost.errors import StartupFailed
from kernelhost.kernel import ExecutionEngine, HeartbeatServer, ShellServer

from tests.conftest import connection_data


def make_graph(demo_properties, calls, failing=None):
    """Graph of mock services that record start/stop calls in order."""
    context = KernelContext().populate(demo_properties, ConnectionDescriptor(**connection_data()))

    def service(spec, name):
        mock = Mock(spec=spec)

        def start():
            calls.append(("start", name))
            if name == failing:
                raise OSError(f"{name} port in use")

        mock.start.side_effect = start
        mock.stop.side_effect = lambda: calls.append(("stop", name))
        return mock

    return ServiceGraph(
        context=context,
        logging=Mock(),
        engine=service(ExecutionEngine, "engine"),
        heartbeat=service(HeartbeatServer, "heartbeat"),
        shell=service(ShellServer, "shell"),
        container=Mock(),
    )


class TestStartupOrder:
    """Services start strictly engine, heartbeat, shell."""

    def test_start_order(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()

        assert sequencer.start(make_graph(demo_properties, calls)) == EXIT_OK

        assert calls == [("start", "engine"), ("start", "heartbeat"), ("start", "shell")]
        assert sequencer.state == SequencerState.RUNNING
        assert sequencer.started_services == ["execution engine", "heartbeat", "shell"]

    def test_engine_ready_before_listeners(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()
        graph = make_graph(demo_properties, calls)

        seen = {}
        graph.heartbeat.start.side_effect = lambda: seen.setdefault("heartbeat", sequencer.state)
        graph.shell.start.side_effect = lambda: seen.setdefault("shell", sequencer.state)

        sequencer.start(graph)

        assert calls == [("start", "engine")]
        assert seen == {
            "heartbeat": SequencerState.LISTENERS_STARTING,
            "shell": SequencerState.LISTENERS_STARTING,
        }

    def test_state_history(self, demo_properties):
        sequencer = StartupSequencer()
        sequencer.start(make_graph(demo_properties, []))

        assert sequencer.history == [
            SequencerState.CONSTRUCTED,
            SequencerState.ENGINE_STARTING,
            SequencerState.ENGINE_READY,
            SequencerState.LISTENERS_STARTING,
            SequencerState.RUNNING,
        ]

    def test_cannot_start_twice(self, demo_properties):
        sequencer = StartupSequencer()
        sequencer.start(make_graph(demo_properties, []))

        with pytest.raises(RuntimeError):
            sequencer.start(make_graph(demo_properties, []))


class TestStartupFailure:
    """A failing service faults the sequencer and stops the sequence."""

    def test_engine_failure_starts_no_listeners(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()

        with pytest.raises(StartupFailed) as exc_info:
            sequencer.start(make_graph(demo_properties, calls, failing="engine"))

        assert exc_info.value.service_name == "execution engine"
        assert calls == [("start", "engine")]
        assert sequencer.state == SequencerState.FAULTED
        assert SequencerState.ENGINE_READY not in sequencer.history

    def test_heartbeat_failure_skips_shell(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()

        with pytest.raises(StartupFailed) as exc_info:
            sequencer.start(make_graph(demo_properties, calls, failing="heartbeat"))

        assert exc_info.value.service_name == "heartbeat"
        assert isinstance(exc_info.value.cause, OSError)
        assert ("start", "shell") not in calls
        assert sequencer.state == SequencerState.FAULTED

    def test_started_services_left_running(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()

        with pytest.raises(StartupFailed):
            sequencer.start(make_graph(demo_properties, calls, failing="shell"))

        assert sequencer.started_services == ["execution engine", "heartbeat"]
        assert not any(action == "stop" for action, _ in calls)

    def test_shutdown_after_fault_does_nothing(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()
        with pytest.raises(StartupFailed):
            sequencer.start(make_graph(demo_properties, calls, failing="shell"))

        sequencer.shutdown()

        assert sequencer.state == SequencerState.FAULTED
        assert not any(action == "stop" for action, _ in calls)


class TestShutdown:
    """Tests for StartupSequencer.shutdown."""

    def test_reverse_order(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()
        sequencer.start(make_graph(demo_properties, calls))
        calls.clear()

        sequencer.shutdown()

        assert calls == [("stop", "shell"), ("stop", "heartbeat"), ("stop", "engine")]
        assert sequencer.state == SequencerState.STOPPED

    def test_stop_error_does_not_block_others(self, demo_properties):
        calls = []
        sequencer = StartupSequencer()
        graph = make_graph(demo_properties, calls)
        graph.shell.stop.side_effect = RuntimeError("stuck")
        sequencer.start(graph)
        calls.clear()

        sequencer.shutdown()

        assert calls == [("stop", "heartbeat"), ("stop", "engine")]
        assert sequencer.state == SequencerState.STOPPED

    def test_before_start_does_nothing(self):
        sequencer = StartupSequencer()
        sequencer.shutdown()
        assert sequencer.state == SequencerState.CONSTRUCTED
