"""Toolchain setup and cleanup commands."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import CommandContext
from ..output import Report


class EnvCommand(Command):
    def __init__(self) -> None:
        super().__init__("env", "Install rustup components and the target")

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        ctx.orchestrator().setup_env()
        return Report(self.name, f"Toolchain ready for {ctx.config.triple}", {"triple": ctx.config.triple})


class CleanCommand(Command):
    def __init__(self) -> None:
        super().__init__("clean", "Remove build artifacts")

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        ctx.orchestrator().clean()
        return Report(self.name, "Build artifacts removed")
