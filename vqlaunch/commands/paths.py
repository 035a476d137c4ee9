"""Show the resolved target and toolchain."""

from __future__ import annotations

from typing import Any, Dict, List

from .base import Command
from ..context import CommandContext
from ..errors import ToolchainNotFound
from ..flags import build_flags
from ..output import Report
from ..target import resolve


class PathsCommand(Command):
    def __init__(self) -> None:
        super().__init__("paths", "Show target triple, artifact paths and toolchain", aliases=("status",))

    def run(self, ctx: CommandContext, argv: List[str]) -> Report:
        target = resolve(ctx.config)
        data: Dict[str, Any] = {
            "arch": ctx.config.arch,
            "mode": ctx.config.mode,
            "tcp": ctx.config.tcp,
            "triple": target.triple,
            "kernel": str(target.kernel_path),
            "image": str(target.image_path),
            "flags": list(build_flags(ctx.config)),
        }
        try:
            toolchain = ctx.orchestrator().resolve().toolchain
        except ToolchainNotFound as exc:
            data["toolchain"] = {"error": str(exc)}
        else:
            data["toolchain"] = {
                "sysroot": str(toolchain.sysroot),
                "objdump": str(toolchain.objdump),
                "objcopy": str(toolchain.objcopy),
            }
        lines = [
            f"triple:  {target.triple}",
            f"kernel:  {target.kernel_path}",
            f"image:   {target.image_path}",
            f"flags:   {' '.join(data['flags'])}",
        ]
        for key, value in data["toolchain"].items():
            lines.append(f"{key + ':':<9}{value}")
        return Report(self.name, "\n".join(lines), data)
