"""
kernel/echo.py - Reference echo kernel

A minimal execution engine that accepts every execute_request and logs
the code it was given. Used to smoke-test installs and as the template
for real engines:

    python -m kernelhost.kernel.echo install --develop
    jupyter console --kernel kernelhost-echo
"""

from __future__ import annotations
from typing import Any, Dict, List
import logging
import sys

from kernelhost import __version__
from kernelhost.core.properties import KernelProperties
from .services import ExecutionEngine, ShellServer

logger = logging.getLogger("kernel.echo")

ECHO_PROPERTIES = KernelProperties(
    kernel_name="kernelhost-echo",
    display_name="Echo",
    friendly_name="Echo",
    language_name="echo",
    kernel_version=__version__,
    description="Echoes submitted code back to the kernel log.",
    entry_module="kernelhost.kernel.echo",
    command="kernelhost-echo",
    language_file_extension=".txt",
)


class EchoEngine(ExecutionEngine):
    """Accepts code and records it without evaluating anything."""

    def __init__(self, shell: ShellServer):
        self.shell = shell
        self.execution_count = 0
        self.history: List[str] = []

    def start(self) -> None:
        self.shell.register_handler("execute_request", self.execute)
        self.shell.register_handler("is_complete_request", self.is_complete)

    def execute(self, message: Dict[str, Any]) -> Dict[str, Any]:
        content = message.get("content", {})
        code = content.get("code", "")

        if content.get("store_history", True) and not content.get("silent", False):
            self.execution_count += 1
            self.history.append(code)

        logger.info(f"echo [{self.execution_count}]: {code}")
        return {
            "status": "ok",
            "execution_count": self.execution_count,
            "user_expressions": {},
            "payload": [],
        }

    def is_complete(self, message: Dict[str, Any]) -> Dict[str, Any]:
        return {"status": "complete"}


def create_application():
    """Echo kernel application with the install and kernel commands."""
    from kernelhost.bootstrap.app import KernelApplication

    return KernelApplication(
        ECHO_PROPERTIES,
        lambda services: services.add_singleton(ExecutionEngine, EchoEngine),
    ).with_default_commands()


if __name__ == "__main__":
    sys.exit(create_application().run())
