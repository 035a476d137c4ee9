"""Error taxonomy for vqlaunch.

Each fatal error carries the process exit status the CLI returns for it.
"""

from __future__ import annotations

from typing import Optional


class VQLaunchError(RuntimeError):
    """Base class for orchestration failures."""

    exit_code = 1


class ToolchainNotFound(VQLaunchError):
    """Toolchain discovery found no candidate executable."""

    exit_code = 3

    def __init__(self, tool: str, detail: Optional[str] = None) -> None:
        message = f"toolchain component not found: {tool}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.tool = tool


class BuildFailure(VQLaunchError):
    """The external build step reported a non-zero result."""

    exit_code = 2

    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class ProvisioningFailure(VQLaunchError):
    """The disk image could not be created."""

    exit_code = 4


class EmulatorLaunchFailure(VQLaunchError):
    """The emulator process could not be started."""

    exit_code = 5


class ProbeFailure(VQLaunchError):
    """The reachability probe could not connect. Never fatal."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        super().__init__(f"probe to {host}:{port} failed: {reason}")
        self.host = host
        self.port = port
        self.reason = reason


__all__ = [
    "VQLaunchError",
    "ToolchainNotFound",
    "BuildFailure",
    "ProvisioningFailure",
    "EmulatorLaunchFailure",
    "ProbeFailure",
]
