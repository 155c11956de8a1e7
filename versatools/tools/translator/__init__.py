"""Text translation engine."""

from __future__ import annotations

from .providers import (
    ChatCompletionProvider,
    EndpointProvider,
    Translation,
    TranslationProvider,
    select_provider,
)
from .translate import TextTranslator, TranslateOptions

__all__ = [
    "TextTranslator",
    "TranslateOptions",
    "Translation",
    "TranslationProvider",
    "ChatCompletionProvider",
    "EndpointProvider",
    "select_provider",
]
