"""The vqlaunch subcommands, looked up by name or alias."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .base import Command
from .build import BuildCommand
from .help import HelpCommand
from .inspect import InspectCommand, inspect_commands
from .launch import LaunchCommand, launch_commands
from .maintenance import CleanCommand, EnvCommand
from .paths import PathsCommand


class CommandTable:
    """Ordered commands plus a flat name/alias index. Names must be unique."""

    def __init__(self, commands: Iterable[Command]) -> None:
        self.commands = tuple(commands)
        self._index: Dict[str, Command] = {}
        for command in self.commands:
            for name in command.names:
                if name in self._index:
                    raise ValueError(f"command name {name!r} used twice")
                self._index[name] = command

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def get(self, name: str) -> Optional[Command]:
        return self._index.get(name)

    def names(self) -> List[str]:
        return sorted(self._index)


def build_command_table() -> CommandTable:
    help_command = HelpCommand()
    table = CommandTable(
        [
            help_command,
            BuildCommand(),
            *launch_commands(),
            EnvCommand(),
            *inspect_commands(),
            CleanCommand(),
            PathsCommand(),
        ]
    )
    help_command.bind(table)
    return table


__all__ = [
    "Command",
    "CommandTable",
    "build_command_table",
    "BuildCommand",
    "HelpCommand",
    "LaunchCommand",
    "InspectCommand",
    "EnvCommand",
    "CleanCommand",
    "PathsCommand",
]
