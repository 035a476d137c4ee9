"""Emulated virtio device graph.

The same six device descriptors are produced for both transport variants.
Only the bus-level transport setting differs: ``modern`` forces the
non-legacy virtio-mmio interface, ``legacy`` keeps the emulator default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

TRANSPORT_LEGACY = "legacy"
TRANSPORT_MODERN = "modern"
TRANSPORTS = (TRANSPORT_LEGACY, TRANSPORT_MODERN)

KIND_BLOCK = "block"
KIND_SERIAL = "serial"
KIND_GPU = "gpu"
KIND_NET = "net"
KIND_KEYBOARD = "keyboard"
KIND_MOUSE = "mouse"

DRIVE_ID = "x0"
NETDEV_ID = "net0"
SERIAL_ID = "virtio-serial0"
FORWARD_PORT = 5555


@dataclass(frozen=True)
class PortForward:
    host_port: int = FORWARD_PORT
    guest_port: int = FORWARD_PORT
    protocol: str = "tcp"

    def render(self) -> str:
        return f"hostfwd={self.protocol}::{self.host_port}-:{self.guest_port}"


@dataclass(frozen=True)
class DeviceDescriptor:
    """One virtio device plus whatever backs it."""

    kind: str
    driver: str
    identifier: Optional[str] = None
    backing: Optional[str] = None
    transport: str = TRANSPORT_LEGACY
    enabled: bool = True
    forwards: Tuple[PortForward, ...] = ()

    def to_qemu_args(self) -> List[str]:
        if self.kind == KIND_BLOCK:
            return [
                "-drive",
                f"file={self.backing},if=none,format=raw,id={self.identifier}",
                "-device",
                f"{self.driver},drive={self.identifier}",
            ]
        if self.kind == KIND_NET:
            netdev = ",".join([f"{self.backing},id={self.identifier}", *(fwd.render() for fwd in self.forwards)])
            return [
                "-device",
                f"{self.driver},netdev={self.identifier}",
                "-netdev",
                netdev,
            ]
        if self.identifier:
            return ["-device", f"{self.driver},id={self.identifier}"]
        return ["-device", self.driver]


@dataclass(frozen=True)
class DeviceTopology:
    variant: str
    devices: Tuple[DeviceDescriptor, ...] = field(default_factory=tuple)

    def active_devices(self) -> List[DeviceDescriptor]:
        return [device for device in self.devices if device.enabled]

    def device(self, kind: str) -> DeviceDescriptor:
        for device in self.devices:
            if device.kind == kind:
                return device
        raise KeyError(kind)

    def bus_args(self) -> List[str]:
        if self.variant == TRANSPORT_MODERN:
            return ["-global", "virtio-mmio.force-legacy=false"]
        return []

    def to_qemu_args(self) -> List[str]:
        args = self.bus_args()
        for device in self.active_devices():
            args.extend(device.to_qemu_args())
        return args


def build_topology(
    image_path: Path,
    variant: str = TRANSPORT_LEGACY,
    *,
    enable_mouse: bool = False,
    forward: Optional[PortForward] = None,
) -> DeviceTopology:
    """Assemble the device list for ``variant`` in a fixed order."""
    if variant not in TRANSPORTS:
        raise ValueError(f"unknown transport variant {variant!r} (expected one of {', '.join(TRANSPORTS)})")
    forward = forward or PortForward()
    devices = (
        DeviceDescriptor(KIND_BLOCK, "virtio-blk-device", DRIVE_ID, str(image_path), variant),
        DeviceDescriptor(KIND_SERIAL, "virtio-serial-device", SERIAL_ID, None, variant),
        DeviceDescriptor(KIND_GPU, "virtio-gpu-device", None, None, variant),
        DeviceDescriptor(KIND_NET, "virtio-net-device", NETDEV_ID, "user", variant, forwards=(forward,)),
        DeviceDescriptor(KIND_KEYBOARD, "virtio-keyboard-device", None, None, variant),
        DeviceDescriptor(KIND_MOUSE, "virtio-mouse-device", None, None, variant, enabled=enable_mouse),
    )
    return DeviceTopology(variant=variant, devices=devices)


__all__ = [
    "DeviceDescriptor",
    "DeviceTopology",
    "PortForward",
    "build_topology",
    "TRANSPORT_LEGACY",
    "TRANSPORT_MODERN",
    "TRANSPORTS",
    "KIND_BLOCK",
    "KIND_SERIAL",
    "KIND_GPU",
    "KIND_NET",
    "KIND_KEYBOARD",
    "KIND_MOUSE",
    "FORWARD_PORT",
]
