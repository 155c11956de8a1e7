"""Raster image engines backed by Pillow."""

from __future__ import annotations

from .background import BackgroundOptions, BgRemover
from .compress import CompressOptions, ImageCompressor, compress_image
from .watermark import Region, WatermarkOptions, WatermarkRemover, blur_region, clamp_region

__all__ = [
    "BgRemover",
    "BackgroundOptions",
    "ImageCompressor",
    "CompressOptions",
    "compress_image",
    "WatermarkRemover",
    "WatermarkOptions",
    "Region",
    "clamp_region",
    "blur_region",
]
