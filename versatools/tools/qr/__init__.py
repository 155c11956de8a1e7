"""QR code engine."""

from __future__ import annotations

from .generate import QrGenerator, QrOptions, render_qr

__all__ = ["QrGenerator", "QrOptions", "render_qr"]
