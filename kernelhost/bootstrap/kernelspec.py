"""
bootstrap/kernelspec.py - Kernel spec synthesis and registration

Builds the kernel.json that tells Jupyter how to launch a kernel, then
hands it to `jupyter kernelspec install`. The spec is written to a
temporary directory that is removed once the registration tool returns,
whether or not it succeeded.

Development installs launch the kernel from the current directory so that
source edits take effect on the next launch; installed specs launch the
kernel's console script by name.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import logging
import os
import subprocess
import sys
import tempfile

from pydantic import BaseModel, Field

from kernelhost.core.properties import KernelProperties
from kernelhost.errors import HostRegistrationFailed, KernelSpecInstallError
from kernelhost.kernel.logging_service import parse_log_level

logger = logging.getLogger("bootstrap.kernelspec")

CONNECTION_FILE_PLACEHOLDER = "{connection_file}"
KERNEL_SPEC_FILENAME = "kernel.json"
DEVELOP_RUNNER = "kernelhost.bootstrap.develop"

DEVELOP_LOG_LEVEL = "INFO"
INSTALLED_LOG_LEVEL = "ERROR"


class KernelSpec(BaseModel):
    """The kernel.json registered with Jupyter."""

    argv: List[str] = Field(..., min_length=1, description="Launch command")
    display_name: str = Field(..., description="Name shown by front ends")
    language: str = Field(..., description="Kernel language")

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


def default_log_level(develop: bool) -> str:
    """Development installs log informational messages; installed ones only errors."""
    return DEVELOP_LOG_LEVEL if develop else INSTALLED_LOG_LEVEL


def synthesize_kernel_spec(
    properties: KernelProperties,
    develop: bool = False,
    log_level: Optional[str] = None,
    cwd: Optional[str] = None,
) -> KernelSpec:
    """
    Build the kernel spec for a kernel.

    Args:
        properties: Kernel identity
        develop: Launch from the current directory instead of the installed
            console script
        log_level: Log level passed to the kernel; defaults per mode
        cwd: Directory development installs run from (default: os.getcwd())

    Returns:
        KernelSpec whose argv ends with the {connection_file} placeholder
    """
    level = parse_log_level(log_level) if log_level else default_log_level(develop)

    if develop:
        project_dir = os.path.abspath(cwd or os.getcwd())
        _announce_develop_install(properties, project_dir)
        argv = [
            sys.executable, "-m", DEVELOP_RUNNER,
            "--project", project_dir,
            properties.develop_module,
        ]
        # Front ends list development specs by their registry name
        display_name = properties.kernel_name
    else:
        argv = [properties.launch_command]
        display_name = properties.display_name

    argv += ["kernel", "--log-level", level, CONNECTION_FILE_PLACEHOLDER]

    return KernelSpec(
        argv=argv,
        display_name=display_name,
        language=properties.language_name,
    )


def _announce_develop_install(properties: KernelProperties, project_dir: str) -> None:
    print(
        "NOTE: Installing a kernel spec which references this directory.\n"
        f"      Any changes made in {project_dir} will affect the operation of the "
        f"{properties.name_for_messages} kernel,\n"
        "      and the kernel will stop working if the directory is removed.\n"
        f"      If this was not what you intended, run '{properties.launch_command} install' "
        "without the '--develop' option.",
        file=sys.stderr,
    )
    logger.warning(f"Development kernel spec for {properties.kernel_name} references {project_dir}")


def write_kernel_spec(spec: KernelSpec, directory: str) -> Path:
    """Write kernel.json into directory."""
    path = Path(directory) / KERNEL_SPEC_FILENAME
    path.write_text(spec.to_json(), encoding="utf-8")
    return path


def registration_command(
    spec_dir: str,
    kernel_name: str,
    jupyter_command: str = "jupyter",
    user: bool = False,
    prefix: Optional[str] = None,
) -> List[str]:
    """Command line for `jupyter kernelspec install`."""
    command = [jupyter_command, "kernelspec", "install", spec_dir, f"--name={kernel_name}"]
    if user:
        command.append("--user")
    if prefix:
        command.append(f"--prefix={prefix}")
    return command


def install_kernel_spec(
    properties: KernelProperties,
    develop: bool = False,
    log_level: Optional[str] = None,
    *,
    user: bool = False,
    prefix: Optional[str] = None,
    jupyter_command: str = "jupyter",
    cwd: Optional[str] = None,
) -> int:
    """
    Synthesize a kernel spec and register it with Jupyter.

    Returns:
        The registration tool's exit status (0)

    Raises:
        HostRegistrationFailed: If the registration tool exits non-zero
        KernelSpecInstallError: If the spec cannot be written or the
            registration tool cannot be launched
    """
    spec = synthesize_kernel_spec(properties, develop, log_level, cwd=cwd)

    try:
        with tempfile.TemporaryDirectory(prefix=f"{properties.kernel_name}-spec-") as spec_dir:
            write_kernel_spec(spec, spec_dir)
            command = registration_command(
                spec_dir,
                properties.kernel_name,
                jupyter_command=jupyter_command,
                user=user,
                prefix=prefix,
            )
            logger.info(f"Registering kernel spec: {' '.join(command)}")
            result = subprocess.run(command, check=False)
    except OSError as e:
        raise KernelSpecInstallError(
            f"Could not register kernel spec with {jupyter_command!r}: {e}",
            command=jupyter_command,
        ) from e

    if result.returncode != 0:
        raise HostRegistrationFailed(result.returncode, command=command)

    logger.info(f"Installed kernel spec {properties.kernel_name}")
    return result.returncode
