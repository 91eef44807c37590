"""
kernel/shell.py - Built-in shell listener

Receives client requests on the shell channel and dispatches them by
message type to handlers registered by the execution engine. Message
framing and signing are delegated to jupyter_client's Session.

kernel_info_request is answered from the kernel properties unless the
engine registers its own handler for it.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging
import threading
import traceback

import zmq
from jupyter_client.session import Session

from kernelhost.core.context import KernelContext
from .services import ShellHandler, ShellServer

logger = logging.getLogger("kernel.shell")

PROTOCOL_VERSION = "5.3"
POLL_INTERVAL_MS = 100


def reply_type_for(msg_type: str) -> str:
    """execute_request -> execute_reply"""
    if msg_type.endswith("_request"):
        return msg_type[: -len("_request")] + "_reply"
    return msg_type + "_reply"


class ZmqShellServer(ShellServer):
    """ROUTER socket request loop running on its own thread."""

    def __init__(self, context: KernelContext):
        connection = context.connection
        self.address = connection.address(connection.shell_port)
        self.endpoint: Optional[str] = None
        self.properties = context.properties

        self.session = Session(
            key=connection.key.encode("utf-8"),
            signature_scheme=connection.signature_scheme,
            username="kernel",
        )

        self._handlers: Dict[str, ShellHandler] = {
            "kernel_info_request": self._kernel_info,
        }
        self._lock = threading.Lock()
        self._zmq = zmq.Context.instance()
        self._socket: Optional[zmq.Socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def message_types(self) -> List[str]:
        with self._lock:
            return sorted(self._handlers)

    def register_handler(self, msg_type: str, handler: ShellHandler) -> None:
        with self._lock:
            self._handlers[msg_type] = handler
        logger.debug(f"Registered shell handler for {msg_type}")

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Shell server already started")

        sock = self._zmq.socket(zmq.ROUTER)
        sock.linger = 0
        try:
            sock.bind(self.address)
        except zmq.ZMQError:
            sock.close(0)
            raise
        self._socket = sock
        self.endpoint = sock.getsockopt_string(zmq.LAST_ENDPOINT)

        self._thread = threading.Thread(target=self._run, name="shell", daemon=True)
        self._thread.start()
        logger.info(f"Shell listening on {self.endpoint}")

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    # =========================================================================
    # Request loop
    # =========================================================================

    def _run(self) -> None:
        sock = self._socket
        poller = zmq.Poller()
        poller.register(sock, zmq.POLLIN)
        try:
            while not self._stop_event.is_set():
                events = dict(poller.poll(POLL_INTERVAL_MS))
                if events.get(sock, 0) & zmq.POLLIN:
                    self._handle_frames(sock, sock.recv_multipart(copy=True))
        except zmq.ZMQError as e:
            logger.error(f"Shell loop stopped: {e}")
        finally:
            sock.close(0)

    def _handle_frames(self, sock: zmq.Socket, frames: List[bytes]) -> None:
        try:
            idents, msg_list = self.session.feed_identities(frames, copy=True)
            message = self.session.deserialize(msg_list, content=True, copy=True)
        except (ValueError, TypeError) as e:
            # Bad signature or framing; the client gets no reply
            logger.warning(f"Dropped invalid shell message: {e}")
            return

        msg_type = message["header"]["msg_type"]
        with self._lock:
            handler = self._handlers.get(msg_type)

        if handler is None:
            logger.warning(f"No handler for shell message {msg_type}")
            return

        content = self._dispatch(handler, message)
        self.session.send(sock, reply_type_for(msg_type), content, parent=message, ident=idents)

    def _dispatch(self, handler: ShellHandler, message: Dict[str, Any]) -> Dict[str, Any]:
        try:
            content = handler(message)
        except Exception as e:
            logger.exception(f"Shell handler for {message['header']['msg_type']} failed")
            return {
                "status": "error",
                "ename": type(e).__name__,
                "evalue": str(e),
                "traceback": traceback.format_exception(type(e), e, e.__traceback__),
            }

        if content is None:
            content = {}
        content.setdefault("status", "ok")
        return content

    def _kernel_info(self, message: Dict[str, Any]) -> Dict[str, Any]:
        properties = self.properties
        return {
            "status": "ok",
            "protocol_version": PROTOCOL_VERSION,
            "implementation": properties.kernel_name,
            "implementation_version": properties.kernel_version,
            "language_info": properties.language_info(),
            "banner": properties.description,
            "help_links": [],
        }
