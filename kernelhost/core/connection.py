"""
core/connection.py - Connection file loading

Parses the connection file written by the Jupyter host. The file names the
transport, bind address, one port per channel and the message signing
parameters. Security fields are never defaulted: a connection file without
a signature scheme or key is rejected.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Union
import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from kernelhost.errors import MalformedConnectionFile, MissingRequiredField

logger = logging.getLogger("core.connection")

CHANNELS = ("hb", "shell", "control", "stdin", "iopub")

REQUIRED_FIELDS = (
    "transport",
    "ip",
    *(f"{channel}_port" for channel in CHANNELS),
    "signature_scheme",
    "key",
)


class ConnectionDescriptor(BaseModel):
    """Transport, ports and signing parameters for one kernel session."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    transport: str = Field(..., description="tcp or ipc")
    ip: str = Field(..., description="Bind address")

    hb_port: int = Field(..., ge=0, le=65535)
    shell_port: int = Field(..., ge=0, le=65535)
    control_port: int = Field(..., ge=0, le=65535)
    stdin_port: int = Field(..., ge=0, le=65535)
    iopub_port: int = Field(..., ge=0, le=65535)

    signature_scheme: str = Field(..., description="e.g. hmac-sha256")
    key: str = Field(..., description="Signing key; empty disables signing")

    def address(self, port: int) -> str:
        """ZeroMQ endpoint for a channel port."""
        if self.transport == "ipc":
            return f"ipc://{self.ip}-{port}"
        return f"{self.transport}://{self.ip}:{port}"

    @property
    def ports(self) -> Dict[str, int]:
        return {channel: getattr(self, f"{channel}_port") for channel in CHANNELS}


def load_connection_file(path: Union[str, Path]) -> ConnectionDescriptor:
    """
    Load a connection file.

    Args:
        path: Path to the JSON connection file written by the host

    Returns:
        ConnectionDescriptor

    Raises:
        MalformedConnectionFile: If the file cannot be read or parsed, or a
            field has the wrong type
        MissingRequiredField: If transport, address, port or signing fields
            are absent
    """
    path = Path(path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedConnectionFile(
            f"Could not read connection file {path}: {e}", path=str(path)
        ) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedConnectionFile(
            f"Connection file {path} is not valid JSON: {e}", path=str(path)
        ) from e

    if not isinstance(data, dict):
        raise MalformedConnectionFile(
            f"Connection file {path} must contain a JSON object", path=str(path)
        )

    missing = [name for name in REQUIRED_FIELDS if data.get(name) is None]
    if missing:
        raise MissingRequiredField(missing, path=str(path))

    try:
        connection = ConnectionDescriptor.model_validate(data)
    except ValidationError as e:
        raise MalformedConnectionFile(
            f"Connection file {path} has invalid values: {e}", path=str(path)
        ) from e

    logger.debug(f"Loaded connection file {path}: transport={connection.transport} ip={connection.ip}")
    return connection
