"""
bootstrap/ - Bootstrap Layer

Kernel spec installation, service assembly and startup sequencing for
kernel applications.
"""

from .config import (
    KernelHostConfig,
    LoggingConfig,
    InstallConfig,
    load_config,
)

from .container import (
    Lifecycle,
    ServiceDescriptor,
    ServiceCollection,
    Container,
    CircularDependencyError,
    ServiceNotFoundError,
)

from .kernelspec import (
    CONNECTION_FILE_PLACEHOLDER,
    KernelSpec,
    default_log_level,
    synthesize_kernel_spec,
    install_kernel_spec,
)

from .assembler import (
    ConfigureServices,
    ServiceGraph,
    assemble_services,
)

from .sequencer import (
    SequencerState,
    StartupSequencer,
)

from .app import (
    EXIT_OK,
    EXIT_FAILURE,
    EXIT_HOST_TOOL_FAILURE,
    KernelApplication,
)

from .entrypoints import (
    setup_logging,
    wait_for_termination,
)


__all__ = [
    # Config
    "KernelHostConfig",
    "LoggingConfig",
    "InstallConfig",
    "load_config",
    # Container
    "Lifecycle",
    "ServiceDescriptor",
    "ServiceCollection",
    "Container",
    "CircularDependencyError",
    "ServiceNotFoundError",
    # Kernel spec
    "CONNECTION_FILE_PLACEHOLDER",
    "KernelSpec",
    "default_log_level",
    "synthesize_kernel_spec",
    "install_kernel_spec",
    # Assembly & startup
    "ConfigureServices",
    "ServiceGraph",
    "assemble_services",
    "SequencerState",
    "StartupSequencer",
    # App
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_HOST_TOOL_FAILURE",
    "KernelApplication",
    # Entry points
    "setup_logging",
    "wait_for_termination",
]
