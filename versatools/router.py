"""Deterministic keyword routing from free-text intent to a tool id.

Rules are evaluated in a fixed order and the first match wins. Some rules
need a co-occurring word (compression only routes to the image compressor
when the prompt also mentions an image) while others do not; that cascade is
kept exactly as listed below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .errors import NoToolsAvailableError
from .tools.common.interfaces import EngineKind, ToolCategory
from .tools.common.pipeline import ToolDescriptor


@dataclass(frozen=True)
class KeywordRule:
    """Route to ``tool_id`` when any trigger (and any required word) appears."""

    triggers: tuple[str, ...]
    tool_id: str
    category: ToolCategory
    requires: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not any(trigger in text for trigger in self.triggers):
            return False
        return not self.requires or any(word in text for word in self.requires)


PDF_KEYWORD = "pdf"

PDF_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("合并", "merge", "combine"), EngineKind.PDF_MERGER.value, ToolCategory.PDF),
    KeywordRule(("拆分", "分割", "split", "extract pages"), EngineKind.PDF_SPLITTER.value, ToolCategory.PDF),
)
PDF_DEFAULT = KeywordRule((PDF_KEYWORD,), EngineKind.PDF_MERGER.value, ToolCategory.PDF)

RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        ("背景", "抠图", "remove background", "background remover"),
        EngineKind.BG_REMOVER.value,
        ToolCategory.IMAGE,
    ),
    KeywordRule(
        ("水印", "去水印", "remove watermark", "watermark remover"),
        EngineKind.WATERMARK_REMOVER.value,
        ToolCategory.IMAGE,
    ),
    KeywordRule(
        ("翻译", "translate", "translation"),
        EngineKind.TEXT_TRANSLATOR.value,
        ToolCategory.TEXT,
    ),
    KeywordRule(
        ("压缩", "缩小", "变小", "compress", "optimize"),
        EngineKind.IMAGE_COMPRESSOR.value,
        ToolCategory.IMAGE,
        requires=("图", "image", "photo", "picture"),
    ),
    KeywordRule(
        ("打包", "压缩包", "zip", "archive"),
        EngineKind.FILE_ARCHIVER.value,
        ToolCategory.FILE,
    ),
    KeywordRule(
        ("视频转gif", "视频 转 gif", "video to gif", "mp4 to gif", "gif from video"),
        EngineKind.VIDEO_TO_GIF.value,
        ToolCategory.IMAGE,
    ),
    KeywordRule(
        ("二维码", "qr code", "qrcode"),
        EngineKind.QR_GENERATOR.value,
        ToolCategory.IMAGE,
    ),
)

FALLBACK_PRIORITY: tuple[str, ...] = (
    EngineKind.PDF_MERGER.value,
    EngineKind.IMAGE_COMPRESSOR.value,
    EngineKind.BG_REMOVER.value,
    EngineKind.FILE_ARCHIVER.value,
    EngineKind.WATERMARK_REMOVER.value,
    EngineKind.TEXT_TRANSLATOR.value,
    EngineKind.QR_GENERATOR.value,
    EngineKind.VIDEO_TO_GIF.value,
)


def _resolve(rule: KeywordRule, tools: Sequence[ToolDescriptor]) -> str:
    for tool in tools:
        if tool.id == rule.tool_id:
            return tool.id
    for tool in tools:
        if tool.category is rule.category:
            return tool.id
    return tools[0].id


def route(prompt: str, tools: Sequence[ToolDescriptor]) -> str:
    """Select one tool id for ``prompt`` among ``tools``.

    Raises:
        NoToolsAvailableError: if ``tools`` is empty.
    """

    if not tools:
        raise NoToolsAvailableError()

    text = (prompt or "").lower()

    if PDF_KEYWORD in text:
        for rule in PDF_RULES:
            if rule.matches(text):
                return _resolve(rule, tools)
        return _resolve(PDF_DEFAULT, tools)

    for rule in RULES:
        if rule.matches(text):
            return _resolve(rule, tools)

    available = {tool.id for tool in tools}
    for tool_id in FALLBACK_PRIORITY:
        if tool_id in available:
            return tool_id
    return tools[0].id


__all__ = ["KeywordRule", "RULES", "PDF_RULES", "FALLBACK_PRIORITY", "route"]
