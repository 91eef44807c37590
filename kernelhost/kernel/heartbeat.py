"""
kernel/heartbeat.py - Built-in heartbeat listener

Clients probe liveness by sending frames on the heartbeat channel; the
kernel echoes each message back unchanged, every frame included.
"""

from __future__ import annotations
from typing import Optional
import logging
import threading

import zmq

from kernelhost.core.context import KernelContext
from .services import HeartbeatServer

logger = logging.getLogger("kernel.heartbeat")

POLL_INTERVAL_MS = 100


class ZmqHeartbeatServer(HeartbeatServer):
    """REP socket echo loop running on its own thread."""

    def __init__(self, context: KernelContext):
        connection = context.connection
        self.address = connection.address(connection.hb_port)
        self.endpoint: Optional[str] = None

        self._zmq = zmq.Context.instance()
        self._socket: Optional[zmq.Socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Heartbeat server already started")

        sock = self._zmq.socket(zmq.REP)
        sock.linger = 0
        try:
            sock.bind(self.address)
        except zmq.ZMQError:
            sock.close(0)
            raise
        self._socket = sock
        self.endpoint = sock.getsockopt_string(zmq.LAST_ENDPOINT)

        self._thread = threading.Thread(target=self._run, name="heartbeat", daemon=True)
        self._thread.start()
        logger.info(f"Heartbeat listening on {self.endpoint}")

    def _run(self) -> None:
        sock = self._socket
        poller = zmq.Poller()
        poller.register(sock, zmq.POLLIN)
        try:
            while not self._stop_event.is_set():
                events = dict(poller.poll(POLL_INTERVAL_MS))
                if events.get(sock, 0) & zmq.POLLIN:
                    sock.send_multipart(sock.recv_multipart(copy=True))
        except zmq.ZMQError as e:
            logger.error(f"Heartbeat loop stopped: {e}")
        finally:
            sock.close(0)

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
