"""objdump passthroughs."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import CommandContext
from ..output import Report

_DESCRIPTIONS = {
    "asm": "Disassemble the kernel",
    "sym": "Show the kernel symbol table",
    "header": "Dump all kernel headers",
}


class InspectCommand(Command):
    def __init__(self, view: str) -> None:
        super().__init__(view, _DESCRIPTIONS[view])
        self.view = view

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        # objdump output has already streamed to the terminal
        status = ctx.orchestrator().inspect(self.view)
        return Report(self.name, "", {"view": self.view, "exit_status": status}, status)


def inspect_commands() -> List[InspectCommand]:
    return [InspectCommand(view) for view in _DESCRIPTIONS]
