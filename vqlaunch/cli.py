"""vqlaunch CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, NoReturn

from .commands import CommandTable, build_command_table
from .config import BUILD_MODES, TCP_CHOICES, RunConfig, parse_toggle
from .context import CommandContext
from .output import Report, emit

LOG = logging.getLogger("vqlaunch.cli")

USAGE_ERROR = 1
INTERRUPTED = 130


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser whose usage errors exit with USAGE_ERROR instead of 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(USAGE_ERROR, f"{self.prog}: error: {message}\n")


def build_arg_parser(table: CommandTable) -> argparse.ArgumentParser:
    env = os.environ
    parser = _ArgumentParser(
        prog="vqlaunch",
        description="Build the virtio example kernel and boot it under QEMU",
        epilog="commands: " + ", ".join(command.name for command in table),
    )
    parser.add_argument("--arch", default=env.get("VQLAUNCH_ARCH", "riscv64"), help="Target architecture (default riscv64)")
    parser.add_argument(
        "--mode",
        choices=BUILD_MODES,
        default=env.get("VQLAUNCH_MODE", "release"),
        help="Build mode (default release)",
    )
    parser.add_argument(
        "--tcp",
        choices=TCP_CHOICES,
        default=env.get("VQLAUNCH_TCP", "off"),
        help="Build with the tcp feature; 'off' disables all default features (default off)",
    )
    parser.add_argument("--project-dir", type=Path, default=Path.cwd(), help="Kernel crate directory (default cwd)")
    parser.add_argument("--target-dir", type=Path, help="Cargo target directory (default <project-dir>/../target)")
    parser.add_argument("--json", action="store_true", help="Emit JSON output when supported")
    parser.add_argument("--log-level", default=env.get("VQLAUNCH_LOG", "INFO"), help="Logging level (default INFO)")
    parser.add_argument("command", help="Command to run (see 'help')")
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig.from_env(
        arch=args.arch,
        mode=args.mode,
        tcp=parse_toggle(args.tcp),
        project_dir=args.project_dir,
        target_dir=args.target_dir,
    )


def main(argv: List[str] | None = None) -> int:
    table = build_command_table()
    parser = build_arg_parser(table)
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        emit(Report("vqlaunch", f"invalid configuration: {exc}", {"kind": "usage"}, USAGE_ERROR, failed=True), json_output=args.json)
        return USAGE_ERROR
    LOG.debug("running %s with %s", args.command, config)
    ctx = CommandContext(config=config, json_output=args.json)
    return run_command(ctx, table, args.command, args.args)


def run_command(ctx: CommandContext, table: CommandTable, name: str, argv: List[str]) -> int:
    command = table.get(name)
    if command is None:
        emit(
            Report(name, f"unknown command: {name}", {"kind": "usage", "known": table.names()}, USAGE_ERROR, failed=True),
            json_output=ctx.json_output,
        )
        return USAGE_ERROR
    try:
        return command.invoke(ctx, argv)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return INTERRUPTED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
