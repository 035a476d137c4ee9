"""Build, provision and boot commands."""

from __future__ import annotations

from typing import List, Sequence

from .base import Command
from ..context import CommandContext
from ..output import Report, launch_report
from ..topology import TRANSPORT_LEGACY, TRANSPORT_MODERN


class LaunchCommand(Command):
    """Boot the kernel under QEMU with one transport variant."""

    def __init__(self, name: str, variant: str, description: str, aliases: Sequence[str] = ()) -> None:
        super().__init__(name, description, aliases=tuple(aliases))
        self.variant = variant

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        orchestrator = ctx.orchestrator()
        status = orchestrator.launch(self.variant)
        return launch_report(self.name, self.variant, status, orchestrator)


def launch_commands() -> List[LaunchCommand]:
    return [
        LaunchCommand(
            "qemu-legacy",
            TRANSPORT_LEGACY,
            "Build and boot with legacy virtio-mmio transport",
            aliases=("run",),
        ),
        LaunchCommand(
            "qemu",
            TRANSPORT_MODERN,
            "Build and boot forcing modern virtio-mmio transport",
            aliases=("run-new", "run_new"),
        ),
    ]
