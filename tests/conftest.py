"""
kernelhost Test Configuration and Fixtures

Provides kernel properties, connection files and logging isolation.
"""

import json
import logging
import socket

import pytest

from kernelhost.core.properties import KernelProperties


def connection_data(ports=(50001, 50002, 50003, 50004, 50005), **overrides):
    """Connection file contents with hb/shell/control/stdin/iopub ports."""
    hb, shell, control, stdin, iopub = ports
    data = {
        "transport": "tcp",
        "ip": "127.0.0.1",
        "hb_port": hb,
        "shell_port": shell,
        "control_port": control,
        "stdin_port": stdin,
        "iopub_port": iopub,
        "signature_scheme": "hmac-sha256",
        "key": "a0436f6c-1916-498b-8eb9-e81ab9368e84",
        "kernel_name": "demo",
    }
    data.update(overrides)
    return data


def write_connection_file(directory, data, name="kernel-test.json"):
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def free_ports(count=5):
    """Ports currently free on the loopback interface."""
    sockets = []
    try:
        for _ in range(count):
            s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            s.bind(("127.0.0.1", 0))
            sockets.append(s)
        return tuple(s.getsockname()[1] for s in sockets)
    finally:
        for s in sockets:
            s.close()


@pytest.fixture
def demo_properties():
    """Kernel identity used across tests."""
    return KernelProperties(
        kernel_name="demo",
        display_name="Demo Kernel",
        friendly_name="Demo",
        language_name="demo-lang",
        kernel_version="0.3.1",
        description="A kernel for tests",
        entry_module="demo_kernel",
        command="demo-kernel",
    )


@pytest.fixture
def connection_file(tmp_path):
    """Well-formed connection file with ports 50001..50005."""
    return write_connection_file(tmp_path, connection_data())


@pytest.fixture
def free_connection_file(tmp_path):
    """Well-formed connection file on ports that are currently free."""
    return write_connection_file(tmp_path, connection_data(ports=free_ports()))


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo root logger changes made by setup_logging and the logging service."""
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
