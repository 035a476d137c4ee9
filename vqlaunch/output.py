"""Command reports and how they are printed.

Every command produces a :class:`Report`.  In text mode the summary goes to
stdout, or to stderr prefixed with the command name when the command failed.
With ``--json`` the whole report is printed as one JSON object.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict

from .errors import BuildFailure, ToolchainNotFound, VQLaunchError

if TYPE_CHECKING:  # pragma: no cover
    from .orchestrator import Orchestrator


@dataclass(frozen=True)
class Report:
    command: str
    summary: str
    details: Dict[str, Any] = field(default_factory=dict)
    exit_code: int = 0
    failed: bool = False

    def to_json(self) -> str:
        payload = {
            "command": self.command,
            "status": "error" if self.failed else "ok",
            "exit_code": self.exit_code,
            "summary": self.summary,
            "details": self.details,
        }
        return json.dumps(payload, indent=2, sort_keys=True, default=str)

    @classmethod
    def from_error(cls, command: str, exc: VQLaunchError) -> "Report":
        details: Dict[str, Any] = {"kind": type(exc).__name__}
        if isinstance(exc, ToolchainNotFound):
            details["tool"] = exc.tool
        elif isinstance(exc, BuildFailure) and exc.returncode is not None:
            details["returncode"] = exc.returncode
        return cls(command, str(exc), details, exc.exit_code, failed=True)


def launch_report(command: str, variant: str, status: int, orchestrator: "Orchestrator") -> Report:
    """Summarise a finished launch: emulator status, devices and probe outcome."""
    details: Dict[str, Any] = {"variant": variant, "exit_status": status}
    if orchestrator.topology is not None:
        details["devices"] = [device.kind for device in orchestrator.topology.active_devices()]
    probe = orchestrator.probe
    if probe is not None:
        if probe.done():
            outcome = probe.result()
            details["probe"] = {"success": outcome.success, "detail": outcome.describe()}
        else:
            details["probe"] = {"success": None, "detail": "no result before the emulator exited"}
    return Report(command, f"Emulator ({variant}) exited with status {status}", details, status)


def emit(report: Report, *, json_output: bool = False) -> None:
    if json_output:
        print(report.to_json())
    elif report.failed:
        print(f"vqlaunch {report.command}: {report.summary}", file=sys.stderr)
    elif report.summary:
        print(report.summary)


__all__ = ["Report", "emit", "launch_report"]
