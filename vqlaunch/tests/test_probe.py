import socket
import threading
import time

import pytest

from vqlaunch.errors import ProbeFailure
from vqlaunch.probe import PROBE_DELAY, PROBE_HOST, PROBE_PAYLOAD, PROBE_PORT, start_probe


class OneShotServer:
    """Accepts a single connection and stores what the client sent."""

    def __init__(self) -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self.port = self._sock.getsockname()[1]
        self._sock.listen(1)
        self._sock.settimeout(5.0)
        self.received = b""
        self.connections = 0
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            conn, _ = self._sock.accept()
        except OSError:
            return
        self.connections += 1
        with conn:
            conn.settimeout(5.0)
            while True:
                try:
                    chunk = conn.recv(1024)
                except OSError:
                    break
                if not chunk:
                    break
                self.received += chunk

    def join(self) -> None:
        self._thread.join(timeout=5.0)
        self._sock.close()


def _unused_port() -> int:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_defaults():
    assert PROBE_DELAY == 4.0
    assert (PROBE_HOST, PROBE_PORT, PROBE_PAYLOAD) == ("localhost", 5555, "hello")


def test_successful_probe_sends_payload():
    server = OneShotServer()
    handle = start_probe(0.0, "127.0.0.1", server.port)
    outcome = handle.result(timeout=5.0)
    server.join()
    assert outcome.success is True
    assert outcome.error is None
    assert server.received == b"hello\n"
    assert server.connections == 1


def test_refused_connection_reports_failure():
    port = _unused_port()
    handle = start_probe(0.0, "127.0.0.1", port)
    outcome = handle.result(timeout=10.0)
    assert outcome.success is False
    assert isinstance(outcome.error, ProbeFailure)
    assert outcome.error.port == port
    assert str(port) in outcome.describe()


def test_single_attempt_after_delay():
    events = []

    def fake_sleep(seconds):
        events.append(("sleep", seconds))

    def fake_connect(address, timeout=None):
        events.append(("connect", address))
        raise ConnectionRefusedError(111, "Connection refused")

    handle = start_probe(PROBE_DELAY, sleep=fake_sleep, connect=fake_connect)
    outcome = handle.result(timeout=5.0)
    assert events == [("sleep", 4.0), ("connect", ("localhost", 5555))]
    assert outcome.success is False
    assert "Connection refused" in outcome.error.reason


def test_timeout_is_a_failure_not_an_exception():
    def fake_connect(address, timeout=None):
        raise socket.timeout("timed out")

    handle = start_probe(0.0, sleep=lambda _: None, connect=fake_connect)
    outcome = handle.result(timeout=5.0)
    assert outcome.success is False
    assert outcome.error.reason == "timed out"


def test_start_does_not_block_on_delay():
    release = threading.Event()

    def blocking_sleep(seconds):
        release.wait(timeout=5.0)

    def fake_connect(address, timeout=None):
        raise ConnectionRefusedError("refused")

    handle = start_probe(60.0, sleep=blocking_sleep, connect=fake_connect)
    assert handle.done() is False
    release.set()
    assert handle.result(timeout=5.0).success is False


def test_done_callback_receives_outcome():
    seen = []
    done = threading.Event()
    release = threading.Event()

    def on_done(outcome):
        seen.append(outcome)
        done.set()

    def fake_connect(address, timeout=None):
        raise ConnectionRefusedError("refused")

    handle = start_probe(0.0, sleep=lambda _: release.wait(5.0), connect=fake_connect)
    handle.add_done_callback(on_done)
    release.set()
    assert done.wait(timeout=5.0)
    assert len(seen) == 1 and seen[0].success is False


def test_probe_failure_message():
    failure = ProbeFailure("localhost", 5555, "refused")
    assert "localhost:5555" in str(failure)


def test_is_alive_tracks_probe_thread():
    release = threading.Event()

    def fake_connect(address, timeout=None):
        raise ConnectionRefusedError("refused")

    handle = start_probe(60.0, sleep=lambda _: release.wait(5.0), connect=fake_connect)
    assert handle.is_alive() is True
    release.set()
    handle.result(timeout=5.0)
    deadline = time.monotonic() + 5.0
    while handle.is_alive() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert handle.is_alive() is False
