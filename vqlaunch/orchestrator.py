"""Build-and-launch sequencing.

A launch runs strictly in order: resolve target and toolchain, build the
kernel, provision the disk image, assemble the device topology, then start
the reachability probe and the emulator side by side.  Only the emulator is
waited on; its exit status becomes the run's result.
"""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Any, Callable, Dict, List, Optional

from .config import RunConfig
from .emulator import EmulatorProcess, emulator_command
from .errors import BuildFailure, ToolchainNotFound
from .flags import build_flags, cargo_build_command
from .image import ensure_image
from .probe import ProbeHandle, ProbeOutcome, start_probe
from .target import (
    SysrootLocator,
    TargetPaths,
    ToolchainPaths,
    ToolLocator,
    query_sysroot,
    resolve,
    resolve_toolchain,
)
from .topology import DeviceTopology, build_topology

LOGGER = logging.getLogger("vqlaunch.orchestrator")

INTERRUPTED = 130
STOP_SIGNALS = ("SIGTERM", "SIGHUP")
INSPECT_VIEWS = {"asm": "-d", "sym": "-t", "header": "-x"}
RUSTUP_COMPONENTS = ("llvm-tools-preview", "rustfmt")


@dataclass(frozen=True)
class Resolution:
    target: TargetPaths
    toolchain: ToolchainPaths


class Orchestrator:
    """Drives one build or launch for a fixed :class:`RunConfig`."""

    def __init__(
        self,
        config: RunConfig,
        *,
        locator: Optional[ToolLocator] = None,
        sysroot: Optional[Path] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        probe_starter: Callable[[], ProbeHandle] = start_probe,
    ) -> None:
        self.config = config
        self._locator = locator
        self._sysroot = sysroot
        self._runner = runner
        self._popen = popen
        self._probe_starter = probe_starter
        self._resolution: Optional[Resolution] = None
        self.topology: Optional[DeviceTopology] = None
        self.probe: Optional[ProbeHandle] = None

    # ------------------------------------------------------------------ helpers

    def run_command(self, cmd: List[str]) -> subprocess.CompletedProcess:
        """Run an external tool in the project directory."""
        cmd_str = " ".join(str(c) for c in cmd)
        LOGGER.info("running: %s", cmd_str)
        try:
            result = self._runner(cmd, cwd=self.config.project_dir)
        except OSError as exc:
            raise BuildFailure(f"cannot run {cmd[0]}: {exc}") from exc
        if result.returncode != 0:
            raise BuildFailure(f"command failed ({result.returncode}): {cmd_str}", result.returncode)
        return result

    def _toolchain(self) -> ToolchainPaths:
        sysroot = self._sysroot
        if sysroot is None:
            sysroot = query_sysroot(self._runner)
        locator = self._locator if self._locator is not None else SysrootLocator(sysroot)
        return resolve_toolchain(locator, sysroot)

    # ------------------------------------------------------------------ steps

    def resolve(self) -> Resolution:
        """Resolve target paths and toolchain once per run."""
        if self._resolution is None:
            target = resolve(self.config)
            toolchain = self._toolchain()
            self._resolution = Resolution(target=target, toolchain=toolchain)
            LOGGER.debug("target %s kernel=%s image=%s", target.triple, target.kernel_path, target.image_path)
        return self._resolution

    def build(self) -> TargetPaths:
        resolution = self.resolve()
        LOGGER.info("building %s (%s)", resolution.target.triple, " ".join(build_flags(self.config)))
        self.run_command(cargo_build_command(self.config))
        return resolution.target

    def launch(self, variant: str) -> int:
        """Build, provision and boot the kernel; return the emulator's exit status."""
        target = self.build()
        ensure_image(target.image_path)
        self.topology = build_topology(target.image_path, variant)
        emulator = EmulatorProcess(
            emulator_command(self.config, target.kernel_path, self.topology),
            cwd=self.config.project_dir,
            popen=self._popen,
        )
        self.probe = self._probe_starter()
        self.probe.add_done_callback(_log_probe_outcome)
        previous = _install_stop_handlers()
        try:
            emulator.start()
            status = emulator.wait()
        except KeyboardInterrupt as exc:
            signum = getattr(exc, "signum", signal.SIGINT)
            LOGGER.warning("interrupted (signal %d), stopping emulator", signum)
            emulator.terminate()
            return 128 + signum
        finally:
            _restore_handlers(previous)
        if not self.probe.done():
            LOGGER.info("probe did not finish before the emulator exited")
        return status

    # ------------------------------------------------------------------ collaborators

    def clean(self) -> int:
        self.run_command(["cargo", "clean"])
        return 0

    def setup_env(self) -> int:
        self.run_command(["rustup", "component", "add", *RUSTUP_COMPONENTS])
        self.run_command(["rustup", "target", "add", self.config.triple])
        return 0

    def inspect(self, view: str) -> int:
        """Dump the kernel with objdump, paged when attached to a terminal."""
        flag = INSPECT_VIEWS[view]
        resolution = self.resolve()
        cmd = [
            str(resolution.toolchain.objdump),
            f"--arch-name={self.config.arch}",
            flag,
            str(resolution.target.kernel_path),
        ]
        pager = _pager()
        if pager is None:
            try:
                return self._runner(cmd).returncode
            except OSError as exc:
                raise ToolchainNotFound(cmd[0], str(exc)) from exc
        LOGGER.debug("piping %s into %s", " ".join(cmd), " ".join(pager))
        try:
            dump = self._popen(cmd, stdout=subprocess.PIPE)
        except OSError as exc:
            raise ToolchainNotFound(cmd[0], str(exc)) from exc
        viewer = self._popen(pager, stdin=dump.stdout)
        if dump.stdout is not None:
            dump.stdout.close()
        viewer.wait()
        return dump.wait()


class StopRequested(KeyboardInterrupt):
    """Raised from a SIGTERM/SIGHUP handler while the emulator is running."""

    def __init__(self, signum: int) -> None:
        super().__init__(signum)
        self.signum = signum


def _raise_stop(signum: int, frame: Optional[FrameType]) -> None:
    raise StopRequested(signum)


def _install_stop_handlers() -> Dict[int, Any]:
    """Route SIGTERM and SIGHUP into the interrupt path; return the old handlers.

    Handlers can only be set from the main thread, elsewhere nothing changes.
    """
    if threading.current_thread() is not threading.main_thread():
        return {}
    previous: Dict[int, Any] = {}
    for name in STOP_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, _raise_stop)
    return previous


def _restore_handlers(previous: Dict[int, Any]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


def _pager() -> Optional[List[str]]:
    if not sys.stdout.isatty():
        return None
    pager = os.environ.get("PAGER", "less")
    if not pager or shutil.which(pager.split()[0]) is None:
        return None
    return pager.split()


def _log_probe_outcome(outcome: ProbeOutcome) -> None:
    if outcome.success:
        LOGGER.info("probe: %s", outcome.describe())
    else:
        LOGGER.warning("probe: %s", outcome.describe())


__all__ = ["Orchestrator", "Resolution", "StopRequested", "INSPECT_VIEWS", "INTERRUPTED"]
