"""
core/properties.py - Kernel identity

Static description of a kernel, supplied once by the kernel author and
shared read-only by every bootstrap component.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict
import re

# Names accepted by `jupyter kernelspec install --name`
_KERNEL_NAME_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


@dataclass(frozen=True)
class KernelProperties:
    """
    Properties describing a kernel to clients and to the host registry.

    Attributes:
        kernel_name: Registry slug, unique among installed kernels
        display_name: Name shown by notebook front ends
        friendly_name: Name used in messages addressed to people
        language_name: Language the kernel executes
        kernel_version: Version of the language kernel
        description: One-line description, also used as the banner
        entry_module: Importable module that runs the kernel application;
            used by development installs
        command: Console script that runs the installed kernel; defaults
            to kernel_name
    """

    kernel_name: str
    display_name: str
    friendly_name: str = ""
    language_name: str = ""
    kernel_version: str = "0.0.0"
    description: str = ""

    # Launch command template
    entry_module: str = ""
    command: str = ""

    # kernel_info_reply language_info
    language_version: str = ""
    language_mimetype: str = "text/plain"
    language_file_extension: str = ""

    def __post_init__(self):
        if not _KERNEL_NAME_PATTERN.fullmatch(self.kernel_name or ""):
            raise ValueError(
                f"Invalid kernel name {self.kernel_name!r}: "
                "use only letters, digits, '.', '_' and '-'"
            )

    @property
    def launch_command(self) -> str:
        """Console script that starts an installed kernel."""
        return self.command or self.kernel_name

    @property
    def develop_module(self) -> str:
        """Module run by development installs."""
        return self.entry_module or self.kernel_name.replace("-", "_")

    @property
    def name_for_messages(self) -> str:
        return self.friendly_name or self.display_name

    def language_info(self) -> Dict[str, Any]:
        info = {
            "name": self.language_name,
            "version": self.language_version,
            "mimetype": self.language_mimetype,
        }
        if self.language_file_extension:
            info["file_extension"] = self.language_file_extension
        return info
