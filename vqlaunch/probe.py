"""Best-effort TCP reachability probe.

After a fixed delay the probe opens one connection to the forwarded guest
port, writes a short greeting and closes.  It does not wait for any signal
from the emulator; if the guest is not listening yet the attempt fails and
is not retried.  The outcome is advisory.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import ProbeFailure

LOGGER = logging.getLogger("vqlaunch.probe")

PROBE_DELAY = 4.0
PROBE_HOST = "localhost"
PROBE_PORT = 5555
PROBE_PAYLOAD = "hello"
CONNECT_TIMEOUT = 5.0


@dataclass(frozen=True)
class ProbeOutcome:
    host: str
    port: int
    success: bool
    attempted_at: float
    error: Optional[ProbeFailure] = None

    def describe(self) -> str:
        if self.success:
            return f"connected to {self.host}:{self.port}"
        return str(self.error)


class ProbeHandle:
    """Read-only view of a running probe."""

    def __init__(self, future: "Future[ProbeOutcome]", thread: threading.Thread) -> None:
        self._future = future
        self._thread = thread

    def done(self) -> bool:
        return self._future.done()

    def is_alive(self) -> bool:
        """True while the probe thread is still sleeping or connecting."""
        return self._thread.is_alive()

    def result(self, timeout: Optional[float] = None) -> ProbeOutcome:
        return self._future.result(timeout=timeout)

    def add_done_callback(self, callback: Callable[[ProbeOutcome], None]) -> None:
        self._future.add_done_callback(lambda fut: callback(fut.result()))


def _attempt(
    host: str,
    port: int,
    payload: str,
    connect: Callable[..., socket.socket],
) -> ProbeOutcome:
    attempted_at = time.time()
    try:
        sock = connect((host, port), timeout=CONNECT_TIMEOUT)
    except OSError as exc:
        return ProbeOutcome(host, port, False, attempted_at, ProbeFailure(host, port, str(exc) or type(exc).__name__))
    try:
        with sock:
            sock.sendall((payload + "\n").encode("utf-8"))
            sock.shutdown(socket.SHUT_WR)
    except OSError as exc:
        return ProbeOutcome(host, port, False, attempted_at, ProbeFailure(host, port, str(exc) or type(exc).__name__))
    return ProbeOutcome(host, port, True, attempted_at)


def start_probe(
    delay: float = PROBE_DELAY,
    host: str = PROBE_HOST,
    port: int = PROBE_PORT,
    payload: str = PROBE_PAYLOAD,
    *,
    sleep: Callable[[float], None] = time.sleep,
    connect: Callable[..., socket.socket] = socket.create_connection,
) -> ProbeHandle:
    """Spawn the probe on a daemon thread and return immediately."""
    future: "Future[ProbeOutcome]" = Future()
    future.set_running_or_notify_cancel()

    def _run() -> None:
        sleep(delay)
        LOGGER.debug("probing %s:%d", host, port)
        try:
            outcome = _attempt(host, port, payload, connect)
        except Exception as exc:  # pragma: no cover - keeps the future from hanging
            future.set_exception(exc)
            return
        future.set_result(outcome)

    thread = threading.Thread(target=_run, name="vqlaunch-probe", daemon=True)
    thread.start()
    return ProbeHandle(future, thread)


__all__ = [
    "ProbeHandle",
    "ProbeOutcome",
    "start_probe",
    "PROBE_DELAY",
    "PROBE_HOST",
    "PROBE_PORT",
    "PROBE_PAYLOAD",
]
