"""Video to GIF engine."""

from __future__ import annotations

from .gif import (
    GifOptions,
    ScratchFiles,
    VideoToGif,
    build_palette_command,
    build_render_command,
    resolve_ffmpeg,
)

__all__ = [
    "VideoToGif",
    "GifOptions",
    "ScratchFiles",
    "build_palette_command",
    "build_render_command",
    "resolve_ffmpeg",
]
