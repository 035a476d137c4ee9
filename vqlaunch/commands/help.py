"""Help command."""

from __future__ import annotations

from typing import List

from .base import Command
from ..context import CommandContext
from ..output import Report


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "List available commands", aliases=("?",))
        self._table = None

    def bind(self, table) -> None:
        self._table = table

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        commands = list(self._table) if self._table is not None else [self]
        lines = ["commands:", *(command.usage_line() for command in commands)]
        details = {command.name: {"description": command.description, "aliases": list(command.aliases)} for command in commands}
        return Report(self.name, "\n".join(lines), details)
