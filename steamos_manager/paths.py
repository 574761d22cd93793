"""Resolution of absolute system paths against a configurable root directory."""

from __future__ import annotations

import os
from pathlib import Path

_root: Path = Path("/")


def set_root(root: str | os.PathLike[str]) -> None:
    """Make every path returned by :func:`path` live below ``root``."""
    global _root
    _root = Path(root)


def root() -> Path:
    """Return the directory that system paths are currently resolved against."""
    return _root


def path(p: str | os.PathLike[str]) -> Path:
    """Map a system path such as ``/etc/foo`` onto the current root."""
    relative = os.fspath(p).lstrip("/")
    return _root / relative if relative else _root