"""
bootstrap/app.py - Kernel application

The command-line application of a kernel. It installs the kernel's spec
into Jupyter and runs kernel instances when Jupyter launches them:

    mykernel install [--develop] [--log-level LEVEL] [--user] [--prefix DIR]
    mykernel kernel CONNECTION_FILE [--log-level LEVEL]

Exit codes: 0 on success, 1 for local failures, 2 when the Jupyter
registration tool fails.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional, Union, Iterable
import argparse
import logging
import subprocess
import sys
import threading

from kernelhost import __version__
from kernelhost.core.connection import load_connection_file
from kernelhost.core.properties import KernelProperties
from kernelhost.errors import HostRegistrationFailed, KernelHostError
from kernelhost.kernel.logging_service import LOG_LEVELS, parse_log_level
from .assembler import ConfigureServices, assemble_services
from .config import KernelHostConfig, load_config
from .entrypoints import setup_logging, wait_for_termination
from .kernelspec import install_kernel_spec
from .sequencer import StartupSequencer

logger = logging.getLogger("bootstrap.app")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_HOST_TOOL_FAILURE = 2

KERNEL_LOG_LEVEL = "ERROR"


class KernelApplication:
    """
    Main application for a kernel.

    Args:
        properties: Properties describing this kernel to clients
        configure: Callback(s) run after the built-in services are
            registered; at a minimum they must register an ExecutionEngine
        config: Configuration; loaded from file/environment when omitted

    Example:
        KernelApplication(
            properties,
            lambda services: services.add_singleton(ExecutionEngine, EchoEngine),
        ).with_default_commands().run()
    """

    def __init__(
        self,
        properties: KernelProperties,
        configure: Union[ConfigureServices, Iterable[ConfigureServices], None] = None,
        config: KernelHostConfig = None,
    ):
        self.properties = properties
        self._configure: List[ConfigureServices] = []
        if callable(configure):
            self._configure.append(configure)
        elif configure is not None:
            self._configure.extend(configure)

        self._config = config
        self._commands: Dict[str, Callable[[argparse._SubParsersAction], None]] = {}
        self._stop_event = threading.Event()
        self.sequencer: Optional[StartupSequencer] = None

    @property
    def config(self) -> KernelHostConfig:
        if self._config is None:
            self._config = load_config()
        return self._config

    def configure_services(self, configure: ConfigureServices) -> "KernelApplication":
        """Add a service configuration callback."""
        self._configure.append(configure)
        return self

    # =========================================================================
    # Commands
    # =========================================================================

    def with_default_commands(self) -> "KernelApplication":
        return self.add_install_command().add_kernel_command()

    def add_install_command(self) -> "KernelApplication":
        def build(subparsers):
            cmd = subparsers.add_parser(
                "install",
                help=f"Installs the {self.properties.kernel_name} kernel into Jupyter.",
            )
            cmd.add_argument(
                "--develop",
                action="store_true",
                help="Installs a kernel spec that runs against this working directory. "
                     "Useful for development only.",
            )
            self._add_log_level_option(
                cmd, "On development mode, defaults to INFO; otherwise ERROR."
            )
            cmd.add_argument("--user", action="store_true", default=None,
                             help="Install for the current user instead of system-wide.")
            cmd.add_argument("--prefix", default=None,
                             help="Install under PREFIX (e.g. a virtual environment).")
            cmd.set_defaults(handler=self._run_install)

        self._commands["install"] = build
        return self

    def add_kernel_command(self) -> "KernelApplication":
        def build(subparsers):
            cmd = subparsers.add_parser(
                "kernel",
                help=f"Runs the {self.properties.kernel_name} kernel. "
                     "Typically only run by a Jupyter client.",
            )
            cmd.add_argument(
                "connection_file",
                metavar="connection-file",
                help="Connection file used to connect to a Jupyter client.",
            )
            self._add_log_level_option(cmd, f"Defaults to {KERNEL_LOG_LEVEL}.")
            cmd.set_defaults(handler=self._run_kernel)

        self._commands["kernel"] = build
        return self

    @staticmethod
    def _add_log_level_option(cmd: argparse.ArgumentParser, default_help: str) -> None:
        cmd.add_argument(
            "-l", "--log-level",
            type=parse_log_level,
            default=None,
            metavar="LEVEL",
            help=f"Level of logging messages to emit ({', '.join(LOG_LEVELS)}). {default_help}",
        )

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=self.properties.launch_command,
            description=self.properties.description,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument(
            "--version",
            action="version",
            version=(
                f"Language kernel: {self.properties.kernel_version}\n"
                f"kernelhost core: {__version__}"
            ),
        )
        subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
        for build in self._commands.values():
            build(subparsers)
        return parser

    def run(self, argv: List[str] = None) -> int:
        """
        Parse arguments and run the selected command.

        Returns:
            Process exit code
        """
        parser = self.build_parser()
        parsed = parser.parse_args(argv)

        handler = getattr(parsed, "handler", None)
        if handler is None:
            parser.print_help(sys.stderr)
            return EXIT_FAILURE

        return handler(parsed)

    def return_exit_code(self, func: Callable[[], int]) -> int:
        """Run func, translating bootstrap failures into exit codes."""
        try:
            return func()
        except HostRegistrationFailed as e:
            print(e.message, file=sys.stderr)
            return EXIT_HOST_TOOL_FAILURE
        except (KernelHostError, OSError, subprocess.SubprocessError) as e:
            print(str(e), file=sys.stderr)
            return EXIT_FAILURE
        except Exception as e:
            logger.debug("Unexpected failure", exc_info=True)
            print(f"{type(e).__name__}: {e}", file=sys.stderr)
            return EXIT_FAILURE

    # =========================================================================
    # install
    # =========================================================================

    def _run_install(self, parsed: argparse.Namespace) -> int:
        setup_logging(level="INFO" if parsed.develop else "WARNING")
        return self.return_exit_code(lambda: self._install_from_options(parsed))

    def _install_from_options(self, parsed: argparse.Namespace) -> int:
        # The registered log level is a per-mode default unless --log-level is given
        install = self.config.install
        return self.install_kernel_spec(
            develop=parsed.develop,
            log_level=parsed.log_level,
            user=install.user if parsed.user is None else parsed.user,
            prefix=parsed.prefix or install.prefix,
        )

    def install_kernel_spec(
        self,
        develop: bool = False,
        log_level: Optional[str] = None,
        user: bool = False,
        prefix: Optional[str] = None,
    ) -> int:
        """Register this kernel's spec with Jupyter."""
        return install_kernel_spec(
            self.properties,
            develop,
            log_level,
            user=user,
            prefix=prefix,
            jupyter_command=self.config.install.jupyter_command,
        )

    # =========================================================================
    # kernel
    # =========================================================================

    def _run_kernel(self, parsed: argparse.Namespace) -> int:
        return self.return_exit_code(lambda: self._kernel_from_options(parsed))

    def _kernel_from_options(self, parsed: argparse.Namespace) -> int:
        log_level = parsed.log_level or self.config.logging.level or KERNEL_LOG_LEVEL
        setup_logging(
            level=log_level,
            log_file=self.config.logging.log_file,
            json_format=self.config.logging.json_logs,
            fmt=self.config.logging.format,
        )
        return self.serve_kernel(parsed.connection_file, log_level)

    def start_kernel(self, connection_file: str, log_level: str = KERNEL_LOG_LEVEL) -> StartupSequencer:
        """
        Load the connection file, assemble services and start them.

        Returns:
            The sequencer, in the RUNNING state
        """
        connection = load_connection_file(connection_file)
        graph = assemble_services(self.properties, connection, log_level, self._configure)

        sequencer = StartupSequencer()
        self.sequencer = sequencer
        sequencer.start(graph)
        return sequencer

    def serve_kernel(self, connection_file: str, log_level: str = KERNEL_LOG_LEVEL) -> int:
        """Start the kernel and block until the process is asked to stop."""
        sequencer = self.start_kernel(connection_file, log_level)
        try:
            wait_for_termination(self._stop_event)
        finally:
            sequencer.shutdown()
        return EXIT_OK

    def request_stop(self) -> None:
        """Ask a serving kernel to shut down."""
        self._stop_event.set()
