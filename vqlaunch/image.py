"""Backing disk image provisioning."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import ProvisioningFailure

LOGGER = logging.getLogger("vqlaunch.image")

IMAGE_SIZE_MIB = 20
_BLOCK = b"\x00" * (1024 * 1024)


def ensure_image(path: Path, size_mib: int = IMAGE_SIZE_MIB) -> bool:
    """Create a zero-filled raw image at ``path`` unless one already exists.

    Returns True when the image was written.  An existing file is left
    untouched and its size is not checked.  There is no locking, so two
    concurrent callers may both write the file.
    """
    path = Path(path)
    if path.exists():
        LOGGER.debug("disk image %s already present", path)
        return False
    LOGGER.info("creating %d MiB disk image %s", size_mib, path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as handle:
            for _ in range(size_mib):
                handle.write(_BLOCK)
    except OSError as exc:
        raise ProvisioningFailure(f"cannot create disk image {path}: {exc}") from exc
    return True


__all__ = ["ensure_image", "IMAGE_SIZE_MIB"]
