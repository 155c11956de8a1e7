"""Namespace for the built-in VersaTools engines."""

from __future__ import annotations

from .archiver import FileArchiver
from .common.interfaces import EngineKind, ExecutionMode, ProcessingEngine, ToolCategory
from .common.pipeline import RegisteredTool, ToolDescriptor, ToolRegistry
from .images import BgRemover, ImageCompressor, WatermarkRemover
from .merger import PdfMerger
from .qr import QrGenerator
from .splitter import PdfSplitter
from .translator import TextTranslator
from .video import VideoToGif


def initialize_tools(registry: ToolRegistry) -> ToolRegistry:
    """Register every built-in engine on ``registry``.

    Calling it again once any tool is registered does nothing.
    """

    if len(registry):
        return registry

    registry.register(
        PdfMerger(),
        name="PDF 合并",
        category=ToolCategory.PDF,
        description="将多个 PDF 文件合并为一个文档",
        ai_exposed=True,
    )
    registry.register(
        PdfSplitter(),
        name="PDF 拆分",
        category=ToolCategory.PDF,
        description="按页码范围将 PDF 拆分为多个文档并打包下载",
        ai_exposed=True,
    )
    registry.register(
        BgRemover(),
        name="背景移除",
        category=ToolCategory.IMAGE,
        description="移除图片背景并输出透明背景图像",
        ai_exposed=True,
    )
    registry.register(
        ImageCompressor(),
        name="图片压缩",
        category=ToolCategory.IMAGE,
        description="压缩图片体积并尽量保持画质",
        ai_exposed=True,
    )
    registry.register(
        WatermarkRemover(),
        name="去除水印",
        category=ToolCategory.IMAGE,
        description="模糊覆盖指定区域以去除图片水印",
        ai_exposed=True,
    )
    registry.register(
        FileArchiver(),
        name="文件打包",
        category=ToolCategory.FILE,
        description="将多个文件打包为一个 ZIP 压缩包",
        ai_exposed=True,
    )
    registry.register(
        TextTranslator(),
        name="文字翻译",
        category=ToolCategory.TEXT,
        description="将文本从一种语言翻译为另一种语言",
        ai_exposed=True,
    )
    registry.register(
        QrGenerator(),
        name="二维码生成",
        category=ToolCategory.IMAGE,
        description="将文本或链接生成二维码图片",
        ai_exposed=True,
    )
    registry.register(
        VideoToGif(),
        name="视频转 GIF",
        category=ToolCategory.IMAGE,
        description="截取视频片段并转换为循环播放的 GIF 动图",
        ai_exposed=True,
    )
    return registry


def build_registry() -> ToolRegistry:
    return initialize_tools(ToolRegistry())


__all__ = [
    "initialize_tools",
    "build_registry",
    "ToolRegistry",
    "ToolDescriptor",
    "RegisteredTool",
    "ProcessingEngine",
    "EngineKind",
    "ExecutionMode",
    "ToolCategory",
]
