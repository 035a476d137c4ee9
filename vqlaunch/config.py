"""Run configuration shared by every orchestration step."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .target import triple_for

DEFAULT_ARCH = "riscv64"
DEFAULT_MODE = "release"
DEFAULT_KERNEL_NAME = "qemu"
BUILD_MODES = ("release", "debug")
TCP_CHOICES = ("on", "off")


def parse_toggle(value: str) -> bool:
    """Map an ``on``/``off`` switch to a bool."""
    text = value.strip().lower()
    if text == "on":
        return True
    if text == "off":
        return False
    raise ValueError(f"expected 'on' or 'off', got {value!r}")


@dataclass(frozen=True)
class RunConfig:
    """Immutable settings for one orchestrator run."""

    arch: str = DEFAULT_ARCH
    mode: str = DEFAULT_MODE
    tcp: bool = False
    project_dir: Path = field(default_factory=Path.cwd)
    target_dir: Optional[Path] = None
    kernel_name: str = DEFAULT_KERNEL_NAME
    qemu_args: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.mode not in BUILD_MODES:
            raise ValueError(f"unknown build mode {self.mode!r} (expected one of {', '.join(BUILD_MODES)})")
        object.__setattr__(self, "project_dir", Path(self.project_dir))
        if self.target_dir is None:
            # The kernel crate lives one level below the cargo workspace root.
            object.__setattr__(self, "target_dir", self.project_dir / ".." / "target")
        else:
            object.__setattr__(self, "target_dir", Path(self.target_dir))
        object.__setattr__(self, "qemu_args", tuple(self.qemu_args))

    @property
    def triple(self) -> str:
        return triple_for(self.arch)

    @property
    def release(self) -> bool:
        return self.mode == "release"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides) -> "RunConfig":
        """Build a config from ``VQLAUNCH_*``/``QEMU_ARGS`` variables plus explicit overrides."""
        env = os.environ if env is None else env
        values = {
            "arch": env.get("VQLAUNCH_ARCH") or DEFAULT_ARCH,
            "mode": env.get("VQLAUNCH_MODE") or DEFAULT_MODE,
            "tcp": parse_toggle(env.get("VQLAUNCH_TCP") or "off"),
            "qemu_args": tuple(shlex.split(env.get("QEMU_ARGS", ""))),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


__all__ = [
    "RunConfig",
    "parse_toggle",
    "DEFAULT_ARCH",
    "DEFAULT_MODE",
    "DEFAULT_KERNEL_NAME",
    "BUILD_MODES",
    "TCP_CHOICES",
]
