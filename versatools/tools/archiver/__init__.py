"""ZIP packaging engine."""

from __future__ import annotations

from .archive import ArchiveOptions, FileArchiver

__all__ = ["FileArchiver", "ArchiveOptions"]
