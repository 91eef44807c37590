"""
kernel/ - Kernel services

Capability interfaces, the built-in heartbeat and shell listeners, the
logging capability and the reference echo engine.
"""

from .services import (
    ShellHandler,
    ExecutionEngine,
    HeartbeatServer,
    ShellServer,
    LoggingService,
)

from .logging_service import (
    LOG_LEVELS,
    parse_log_level,
    ConsoleLoggingService,
)

from .heartbeat import ZmqHeartbeatServer

from .shell import (
    PROTOCOL_VERSION,
    ZmqShellServer,
    reply_type_for,
)

__all__ = [
    # Capabilities
    "ShellHandler",
    "ExecutionEngine",
    "HeartbeatServer",
    "ShellServer",
    "LoggingService",
    # Logging
    "LOG_LEVELS",
    "parse_log_level",
    "ConsoleLoggingService",
    # Listeners
    "ZmqHeartbeatServer",
    "PROTOCOL_VERSION",
    "ZmqShellServer",
    "reply_type_for",
]
