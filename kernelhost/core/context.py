"""
core/context.py - Kernel runtime context

Holds the loaded connection file and the kernel properties. The context is
populated exactly once, before any service is constructed, and is frozen
from then on so services can read it from any thread without locking.
"""

from __future__ import annotations
from typing import Any, Optional

from kernelhost.errors import ContextFrozenError, ContextNotPopulatedError
from .connection import ConnectionDescriptor
from .properties import KernelProperties


class KernelContext:
    """Write-once context shared by the engine and the listeners."""

    def __init__(self):
        object.__setattr__(self, "_properties", None)
        object.__setattr__(self, "_connection", None)
        object.__setattr__(self, "_frozen", False)

    def populate(
        self,
        properties: KernelProperties,
        connection: ConnectionDescriptor,
    ) -> "KernelContext":
        """
        Populate the context and freeze it.

        Raises:
            ContextFrozenError: If the context was already populated
        """
        if self._frozen:
            raise ContextFrozenError("Kernel context is already populated")

        object.__setattr__(self, "_properties", properties)
        object.__setattr__(self, "_connection", connection)
        object.__setattr__(self, "_frozen", True)
        return self

    @property
    def is_populated(self) -> bool:
        return self._frozen

    @property
    def properties(self) -> KernelProperties:
        return self._require(self._properties)

    @property
    def connection(self) -> ConnectionDescriptor:
        return self._require(self._connection)

    def _require(self, value: Optional[Any]) -> Any:
        if not self._frozen:
            raise ContextNotPopulatedError("Kernel context was read before it was populated")
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise ContextFrozenError(f"Cannot set {name!r}: kernel context is frozen")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        if not self._frozen:
            return "KernelContext(<empty>)"
        return f"KernelContext(kernel={self._properties.kernel_name!r}, transport={self._connection.transport!r})"
