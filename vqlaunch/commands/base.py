"""Shared behaviour of every vqlaunch subcommand."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from ..context import CommandContext
from ..errors import VQLaunchError
from ..output import Report, emit

LOGGER = logging.getLogger("vqlaunch.commands")


@dataclass
class Command:
    """A subcommand produces a :class:`Report`; ``invoke`` turns it into an exit status.

    Orchestration errors raised from ``run`` become failed reports carrying
    the error's own exit code, so every command maps failures the same way.
    """

    name: str
    description: str
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases)

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        raise NotImplementedError(f"{type(self).__name__} does not implement run()")

    def invoke(self, ctx: CommandContext, argv: List[str]) -> int:
        try:
            report = self.run(ctx, argv)
        except VQLaunchError as exc:
            LOGGER.debug("%s failed", self.name, exc_info=True)
            report = Report.from_error(self.name, exc)
        emit(report, json_output=ctx.json_output)
        return report.exit_code

    def usage_line(self) -> str:
        line = f"  {self.name:<12} {self.description}"
        if self.aliases:
            line += f" (also: {', '.join(self.aliases)})"
        return line
