"""QEMU command line and process management."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional

from .errors import EmulatorLaunchFailure
from .topology import DeviceTopology

if TYPE_CHECKING:  # pragma: no cover
    from .config import RunConfig

LOGGER = logging.getLogger("vqlaunch.emulator")

TERMINATE_TIMEOUT = 5.0


def emulator_binary(arch: str) -> str:
    return f"qemu-system-{arch}"


def emulator_command(config: "RunConfig", kernel_path: Path, topology: DeviceTopology) -> List[str]:
    cmd = [emulator_binary(config.arch)]
    cmd.extend(config.qemu_args)
    cmd.extend(
        [
            "-machine",
            "virt",
            "-serial",
            "mon:stdio",
            "-bios",
            "default",
            "-kernel",
            str(kernel_path),
        ]
    )
    cmd.extend(topology.to_qemu_args())
    return cmd


def exit_status(returncode: int) -> int:
    """Translate a Popen return code into a shell-style exit status."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


class EmulatorProcess:
    """Owns the emulator subprocess for one launch.

    On POSIX the emulator gets its own session so that termination can be
    delivered to its whole process group.
    """

    def __init__(
        self,
        cmd: List[str],
        cwd: Optional[Path] = None,
        *,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.cmd = cmd
        self.cwd = cwd
        self._popen = popen
        self.process: Optional[subprocess.Popen] = None

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process is not None else None

    @property
    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def start(self) -> None:
        LOGGER.info("starting emulator: %s", " ".join(self.cmd))
        kwargs = {}
        if os.name != "nt":
            kwargs["start_new_session"] = True
        try:
            self.process = self._popen(self.cmd, cwd=self.cwd, **kwargs)
        except OSError as exc:
            raise EmulatorLaunchFailure(f"cannot start {self.cmd[0]}: {exc}") from exc

    def wait(self) -> int:
        if self.process is None:
            raise EmulatorLaunchFailure("emulator was never started")
        returncode = self.process.wait()
        status = exit_status(returncode)
        if returncode < 0:
            LOGGER.warning("emulator terminated by signal %d", -returncode)
        else:
            LOGGER.info("emulator exited with status %d", status)
        return status

    def terminate(self) -> None:
        proc = self.process
        if proc is None or proc.poll() is not None:
            return
        LOGGER.info("stopping emulator pid %s", proc.pid)
        self._signal(proc, signal.SIGTERM)
        try:
            proc.wait(timeout=TERMINATE_TIMEOUT)
        except subprocess.TimeoutExpired:
            LOGGER.warning("emulator did not stop within %.0fs, killing", TERMINATE_TIMEOUT)
            self._signal(proc, getattr(signal, "SIGKILL", signal.SIGTERM))
            proc.wait()

    def _signal(self, proc: subprocess.Popen, signum: int) -> None:
        if os.name == "nt":
            if signum == signal.SIGTERM:
                proc.terminate()
            else:
                proc.kill()
            return
        try:
            os.killpg(proc.pid, signum)
        except ProcessLookupError:
            pass


__all__ = ["EmulatorProcess", "emulator_command", "emulator_binary", "exit_status"]
