"""
core/ - Kernel identity, connection file and runtime context.
"""

from .properties import KernelProperties
from .connection import (
    CHANNELS,
    REQUIRED_FIELDS,
    ConnectionDescriptor,
    load_connection_file,
)
from .context import KernelContext

__all__ = [
    "KernelProperties",
    "CHANNELS",
    "REQUIRED_FIELDS",
    "ConnectionDescriptor",
    "load_connection_file",
    "KernelContext",
]
