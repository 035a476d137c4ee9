"""Kernel build command."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import CommandContext
from ..flags import build_flags
from ..output import Report


class BuildCommand(Command):
    def __init__(self) -> None:
        super().__init__("build", "Compile the kernel only", aliases=("kernel",))

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        target = ctx.orchestrator().build()
        details = {
            "triple": target.triple,
            "kernel": str(target.kernel_path),
            "flags": list(build_flags(ctx.config)),
        }
        return Report(self.name, f"Built {target.kernel_path}", details)
