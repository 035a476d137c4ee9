"""Target triple, artifact paths and toolchain discovery.

The toolchain lives inside the Rust sysroot (``rustc --print sysroot``); the
LLVM tools shipped by the ``llvm-tools-preview`` component are found by
walking that tree.  Discovery goes through a :class:`ToolLocator` so callers
and tests can substitute their own lookup.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Protocol

from .errors import ToolchainNotFound

if TYPE_CHECKING:  # pragma: no cover
    from .config import RunConfig

LOGGER = logging.getLogger("vqlaunch.target")

TRIPLE_TEMPLATE = "{arch}imac-unknown-none-elf"
IMAGE_NAME = "img"
OBJDUMP = "llvm-objdump"
OBJCOPY = "llvm-objcopy"


def triple_for(arch: str) -> str:
    """Return the bare-metal target triple for ``arch``.

    The architecture is substituted as given; nothing checks it against a
    list of known targets.
    """
    return TRIPLE_TEMPLATE.format(arch=arch)


@dataclass(frozen=True)
class TargetPaths:
    triple: str
    kernel_path: Path
    image_path: Path


def resolve(config: "RunConfig") -> TargetPaths:
    """Derive the triple and build artifact locations for ``config``."""
    triple = triple_for(config.arch)
    out_dir = Path(config.target_dir) / triple / config.mode
    return TargetPaths(
        triple=triple,
        kernel_path=out_dir / config.kernel_name,
        image_path=out_dir / IMAGE_NAME,
    )


@dataclass(frozen=True)
class ToolchainPaths:
    sysroot: Path
    objdump: Path
    objcopy: Path


class ToolLocator(Protocol):
    def find(self, tool_name: str) -> Path:
        ...


class SysrootLocator:
    """Find executables by name below a sysroot.

    Search order is a depth-first walk of the tree in which every directory's
    entries are visited in sorted order; the first regular file whose name
    equals the requested tool wins.  Later matches are ignored.
    """

    def __init__(self, sysroot: Path) -> None:
        self.sysroot = Path(sysroot)

    def candidates(self, tool_name: str) -> List[Path]:
        matches: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.sysroot):
            dirnames.sort()
            for name in sorted(filenames):
                if name != tool_name:
                    continue
                path = Path(dirpath) / name
                if path.is_file():
                    matches.append(path)
        return matches

    def find(self, tool_name: str) -> Path:
        matches = self.candidates(tool_name)
        if not matches:
            raise ToolchainNotFound(tool_name, f"searched {self.sysroot}")
        if len(matches) > 1:
            LOGGER.debug("%d candidates for %s, using %s", len(matches), tool_name, matches[0])
        return matches[0]


def query_sysroot(runner: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> Path:
    """Ask the compiler for its installation root."""
    cmd = ["rustc", "--print", "sysroot"]
    LOGGER.debug("running %s", " ".join(cmd))
    try:
        result = runner(cmd, capture_output=True, text=True)
    except OSError as exc:
        raise ToolchainNotFound("rustc", str(exc)) from exc
    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise ToolchainNotFound("rustc", stderr or f"exit status {result.returncode}")
    sysroot = (result.stdout or "").strip()
    if not sysroot:
        raise ToolchainNotFound("rustc", "empty sysroot")
    return Path(sysroot)


def resolve_toolchain(locator: ToolLocator, sysroot: Path) -> ToolchainPaths:
    """Locate the disassembler and symbol-copy tools."""
    paths = ToolchainPaths(
        sysroot=Path(sysroot),
        objdump=locator.find(OBJDUMP),
        objcopy=locator.find(OBJCOPY),
    )
    LOGGER.debug("toolchain: objdump=%s objcopy=%s", paths.objdump, paths.objcopy)
    return paths


__all__ = [
    "TargetPaths",
    "ToolchainPaths",
    "ToolLocator",
    "SysrootLocator",
    "triple_for",
    "resolve",
    "query_sysroot",
    "resolve_toolchain",
    "IMAGE_NAME",
    "OBJDUMP",
    "OBJCOPY",
]
