"""Cargo flag assembly for the kernel build."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

from .target import triple_for

if TYPE_CHECKING:  # pragma: no cover
    from .config import RunConfig

RELEASE_FLAG = "--release"
NO_DEFAULT_FEATURES = "--no-default-features"
TCP_FEATURE = "tcp"


def build_flags(config: "RunConfig") -> Tuple[str, ...]:
    """Return the cargo arguments selected by mode and the tcp toggle.

    Turning tcp off drops every default feature, not only ``tcp``.
    """
    flags: List[str] = ["--target", triple_for(config.arch)]
    if config.release:
        flags.append(RELEASE_FLAG)
    if config.tcp:
        flags.extend(["--features", TCP_FEATURE])
    else:
        flags.append(NO_DEFAULT_FEATURES)
    return tuple(flags)


def cargo_build_command(config: "RunConfig") -> List[str]:
    return ["cargo", "build", *build_flags(config)]


__all__ = ["build_flags", "cargo_build_command", "RELEASE_FLAG", "NO_DEFAULT_FEATURES", "TCP_FEATURE"]
