"""
vqlaunch - build-and-launch orchestrator for the virtio example kernel.

Resolves the bare-metal target and LLVM tools, builds the kernel with cargo,
provisions a raw disk image, assembles the virtio device topology and boots
QEMU while a background probe pokes the forwarded guest port.  Use
``python -m vqlaunch`` or the ``vqlaunch`` console script.
"""

from __future__ import annotations

from .config import RunConfig  # noqa: F401
from .errors import (  # noqa: F401
    BuildFailure,
    EmulatorLaunchFailure,
    ProbeFailure,
    ProvisioningFailure,
    ToolchainNotFound,
    VQLaunchError,
)
from .flags import build_flags  # noqa: F401
from .image import ensure_image  # noqa: F401
from .orchestrator import Orchestrator  # noqa: F401
from .probe import ProbeHandle, ProbeOutcome, start_probe  # noqa: F401
from .target import SysrootLocator, ToolLocator, resolve, triple_for  # noqa: F401
from .topology import DeviceDescriptor, DeviceTopology, build_topology  # noqa: F401

__all__ = [
    "RunConfig",
    "VQLaunchError",
    "ToolchainNotFound",
    "BuildFailure",
    "ProvisioningFailure",
    "ProbeFailure",
    "EmulatorLaunchFailure",
    "build_flags",
    "ensure_image",
    "Orchestrator",
    "ProbeHandle",
    "ProbeOutcome",
    "start_probe",
    "SysrootLocator",
    "ToolLocator",
    "resolve",
    "triple_for",
    "DeviceDescriptor",
    "DeviceTopology",
    "build_topology",
]

__version__ = "0.1.0"
