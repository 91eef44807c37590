"""
errors/ - Error Taxonomy

Structured exceptions for the install and kernel commands.
"""

from .taxonomy import (
    ErrorCategory,
    ErrorCode,
    KernelHostError,
    MalformedConnectionFile,
    MissingRequiredField,
    HostRegistrationFailed,
    KernelSpecInstallError,
    MissingExecutionEngine,
    StartupFailed,
    ContextFrozenError,
    ContextNotPopulatedError,
    InvalidConfigError,
)

__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "KernelHostError",
    "MalformedConnectionFile",
    "MissingRequiredField",
    "HostRegistrationFailed",
    "KernelSpecInstallError",
    "MissingExecutionEngine",
    "StartupFailed",
    "ContextFrozenError",
    "ContextNotPopulatedError",
    "InvalidConfigError",
]
