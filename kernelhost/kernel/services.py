"""
kernel/services.py - Kernel service capabilities

Capability interfaces the bootstrap layer registers, resolves and starts.
Built-in implementations exist for every capability except the execution
engine, which the embedding kernel must supply.

Usage:
    def configure(services):
        services.add_singleton(ExecutionEngine, MyEngine)

    KernelApplication(properties, configure).with_default_commands().run()
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

# A shell handler receives the deserialized request and returns reply content
ShellHandler = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


class ExecutionEngine(ABC):
    """Executes code on behalf of the shell listener."""

    @abstractmethod
    def start(self) -> None:
        """Prepare the engine; returns once it can accept requests."""

    def stop(self) -> None:
        pass


class HeartbeatServer(ABC):
    """Echoes every frame received on the heartbeat channel."""

    @abstractmethod
    def start(self) -> None:
        """Bind the heartbeat channel and begin echoing."""

    def stop(self) -> None:
        pass


class ShellServer(ABC):
    """Accepts client requests and dispatches them to registered handlers."""

    @abstractmethod
    def start(self) -> None:
        """Bind the shell channel and begin dispatching."""

    @abstractmethod
    def register_handler(self, msg_type: str, handler: ShellHandler) -> None:
        """Route requests of msg_type to handler."""

    def stop(self) -> None:
        pass


class LoggingService(ABC):
    """Minimum-severity filter shared by every kernel service."""

    @abstractmethod
    def set_min_level(self, level: str) -> None:
        """Set the minimum severity; may be called once."""

    @abstractmethod
    def get_logger(self, name: str):
        """Return a logger honoring the minimum severity."""
