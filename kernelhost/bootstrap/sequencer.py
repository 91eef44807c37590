"""
bootstrap/sequencer.py - Kernel startup sequencing

Starts the assembled services in dependency order: the execution engine
first, so the shell never dispatches to an engine that is not ready; then
the heartbeat, so liveness probes succeed while the shell is still coming
up; then the shell.

A service that fails to start faults the sequencer. Services already
started are left running; the process is expected to exit.
"""

from __future__ import annotations
from typing import List, Tuple
from enum import Enum
import logging

from kernelhost.errors import StartupFailed
from .assembler import ServiceGraph

logger = logging.getLogger("bootstrap.sequencer")

EXIT_OK = 0


class SequencerState(Enum):
    """Startup lifecycle states."""
    CONSTRUCTED = "constructed"
    ENGINE_STARTING = "engine_starting"
    ENGINE_READY = "engine_ready"
    LISTENERS_STARTING = "listeners_starting"
    RUNNING = "running"
    STOPPED = "stopped"
    FAULTED = "faulted"


class StartupSequencer:
    """Single-use state machine that brings a kernel instance up."""

    def __init__(self):
        self._state = SequencerState.CONSTRUCTED
        self._history: List[SequencerState] = [self._state]
        self._started: List[Tuple[str, object]] = []

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def history(self) -> List[SequencerState]:
        return list(self._history)

    @property
    def started_services(self) -> List[str]:
        return [name for name, _ in self._started]

    def start(self, graph: ServiceGraph) -> int:
        """
        Start the engine, then the heartbeat, then the shell.

        Returns:
            EXIT_OK once every service is running

        Raises:
            StartupFailed: If any service fails to start
        """
        if self._state != SequencerState.CONSTRUCTED:
            raise RuntimeError(f"Sequencer cannot start from state {self._state.value}")

        (engine_name, engine), *listeners = graph.startup_order()

        self._transition(SequencerState.ENGINE_STARTING)
        self._start_service(engine_name, engine)
        self._transition(SequencerState.ENGINE_READY)

        self._transition(SequencerState.LISTENERS_STARTING)
        for name, service in listeners:
            self._start_service(name, service)

        self._transition(SequencerState.RUNNING)
        logger.info(f"Kernel {graph.context.properties.kernel_name} running")
        return EXIT_OK

    def _start_service(self, name: str, service: object) -> None:
        logger.debug(f"Starting {name}")
        try:
            service.start()
        except Exception as e:
            self._transition(SequencerState.FAULTED)
            logger.error(f"Failed to start {name}: {e}")
            raise StartupFailed(name, e) from e

        self._started.append((name, service))
        logger.debug(f"Started {name}")

    def shutdown(self) -> None:
        """Stop running services in reverse start order."""
        if self._state != SequencerState.RUNNING:
            return

        for name, service in reversed(self._started):
            stop = getattr(service, "stop", None)
            if not callable(stop):
                continue
            try:
                stop()
                logger.debug(f"Stopped {name}")
            except Exception as e:
                logger.error(f"Failed to stop {name}: {e}")

        self._transition(SequencerState.STOPPED)

    def _transition(self, state: SequencerState) -> None:
        logger.debug(f"Sequencer {self._state.value} -> {state.value}")
        self._state = state
        self._history.append(state)
