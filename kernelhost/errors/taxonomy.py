"""
errors/taxonomy.py - Error classification for kernel bootstrap

Every failure raised by the bootstrap layer is terminal for the command
that triggered it. Each error carries a stable code so entry points can
map it to a process exit status.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
from enum import Enum


class ErrorCategory(Enum):
    """Error categories."""
    # Connection file errors (1xxx)
    CONNECTION = "connection"

    # Kernel spec registration errors (2xxx)
    REGISTRATION = "registration"

    # Service assembly errors (3xxx)
    ASSEMBLY = "assembly"

    # Startup errors (4xxx)
    STARTUP = "startup"

    # Runtime context errors (5xxx)
    CONTEXT = "context"

    # Configuration errors (6xxx)
    CONFIGURATION = "configuration"


class ErrorCode(Enum):
    """Specific error codes."""

    # Connection (1xxx)
    CON_MALFORMED = 1001
    CON_MISSING_FIELD = 1002

    # Registration (2xxx)
    REG_HOST_TOOL = 2001
    REG_LOCAL = 2002

    # Assembly (3xxx)
    ASM_MISSING_ENGINE = 3001

    # Startup (4xxx)
    STA_SERVICE_FAILED = 4001

    # Context (5xxx)
    CTX_FROZEN = 5001
    CTX_NOT_POPULATED = 5002

    # Configuration (6xxx)
    CFG_INVALID = 6001


class KernelHostError(Exception):
    """
    Base class for kernel bootstrap errors.

    Provides structured error information with:
    - Error code for programmatic handling
    - Human-readable message
    - Detailed context for debugging
    """

    code: ErrorCode = ErrorCode.CON_MALFORMED
    category: ErrorCategory = ErrorCategory.CONNECTION

    def __init__(self, message: str = "", *, details: Optional[Dict[str, Any]] = None, **kwargs):
        self.message = message or (self.__class__.__doc__ or "").strip() or "Kernel bootstrap error"
        self.details = details or {}
        self.details.update(kwargs)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for diagnostics."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# CONNECTION FILE
# =============================================================================

class MalformedConnectionFile(KernelHostError):
    """The connection file could not be parsed."""

    code = ErrorCode.CON_MALFORMED
    category = ErrorCategory.CONNECTION


class MissingRequiredField(KernelHostError):
    """The connection file lacks one or more required fields."""

    code = ErrorCode.CON_MISSING_FIELD
    category = ErrorCategory.CONNECTION

    def __init__(self, fields: Sequence[str], *, path: str = ""):
        self.fields: List[str] = list(fields)
        where = f" in {path}" if path else ""
        super().__init__(
            f"Connection file is missing required field(s){where}: {', '.join(self.fields)}",
            fields=self.fields,
            path=path,
        )


# =============================================================================
# KERNEL SPEC REGISTRATION
# =============================================================================

class HostRegistrationFailed(KernelHostError):
    """The host's kernelspec registration tool exited with a non-zero status."""

    code = ErrorCode.REG_HOST_TOOL
    category = ErrorCategory.REGISTRATION

    def __init__(self, exit_code: int, *, command: Sequence[str] = ()):
        self.exit_code = exit_code
        self.command = list(command)
        super().__init__(
            f"Kernel spec registration failed: '{' '.join(self.command)}' exited with status {exit_code}",
            exit_code=exit_code,
            command=self.command,
        )


class KernelSpecInstallError(KernelHostError):
    """The kernel spec could not be prepared or handed to the registration tool."""

    code = ErrorCode.REG_LOCAL
    category = ErrorCategory.REGISTRATION


# =============================================================================
# ASSEMBLY AND STARTUP
# =============================================================================

class MissingExecutionEngine(KernelHostError):
    """No execution engine was registered by the kernel."""

    code = ErrorCode.ASM_MISSING_ENGINE
    category = ErrorCategory.ASSEMBLY


class StartupFailed(KernelHostError):
    """A kernel service failed to start."""

    code = ErrorCode.STA_SERVICE_FAILED
    category = ErrorCategory.STARTUP

    def __init__(self, service_name: str, cause: Optional[BaseException] = None):
        self.service_name = service_name
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Failed to start {service_name}{reason}",
            service=service_name,
        )


# =============================================================================
# RUNTIME CONTEXT
# =============================================================================

class ContextFrozenError(KernelHostError):
    """The kernel context was already populated and can no longer change."""

    code = ErrorCode.CTX_FROZEN
    category = ErrorCategory.CONTEXT


class ContextNotPopulatedError(KernelHostError):
    """The kernel context was read before it was populated."""

    code = ErrorCode.CTX_NOT_POPULATED
    category = ErrorCategory.CONTEXT


# =============================================================================
# CONFIGURATION
# =============================================================================

class InvalidConfigError(KernelHostError):
    """The configuration file could not be parsed."""

    code = ErrorCode.CFG_INVALID
    category = ErrorCategory.CONFIGURATION
