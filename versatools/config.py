"""Environment-driven settings for engines that talk to external services."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_DEEPSEEK_BASE_URL = "https://api.deepseek.com"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"
DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"
DEFAULT_TRANSLATE_TIMEOUT = 30.0


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class TranslatorSettings:
    """Translation provider credentials, read from the environment.

    Providers are tried in order: DeepSeek, OpenAI, then a generic
    LibreTranslate-style endpoint. With none configured the translator
    echoes its input.
    """

    deepseek_api_key: str | None = None
    deepseek_base_url: str = DEFAULT_DEEPSEEK_BASE_URL
    deepseek_model: str = DEFAULT_DEEPSEEK_MODEL
    openai_api_key: str | None = None
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    translate_api_url: str | None = None
    translate_api_key: str | None = None
    timeout: float = DEFAULT_TRANSLATE_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TranslatorSettings":
        env = os.environ if environ is None else environ
        timeout = _clean(env.get("VERSATOOLS_TRANSLATE_TIMEOUT"))
        return cls(
            deepseek_api_key=_clean(env.get("DEEPSEEK_API_KEY")),
            deepseek_base_url=_clean(env.get("DEEPSEEK_API_BASE_URL")) or DEFAULT_DEEPSEEK_BASE_URL,
            deepseek_model=_clean(env.get("DEEPSEEK_TRANSLATE_MODEL")) or DEFAULT_DEEPSEEK_MODEL,
            openai_api_key=_clean(env.get("OPENAI_API_KEY")),
            openai_base_url=_clean(env.get("OPENAI_API_BASE_URL")) or DEFAULT_OPENAI_BASE_URL,
            openai_model=_clean(env.get("OPENAI_TRANSLATE_MODEL")) or DEFAULT_OPENAI_MODEL,
            translate_api_url=_clean(env.get("TRANSLATE_API_URL")),
            translate_api_key=_clean(env.get("TRANSLATE_API_KEY")),
            timeout=float(timeout) if timeout else DEFAULT_TRANSLATE_TIMEOUT,
        )


@dataclass(frozen=True)
class FfmpegSettings:
    """Location of the ffmpeg executable used for transcoding."""

    executable: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FfmpegSettings":
        env = os.environ if environ is None else environ
        return cls(executable=_clean(env.get("VERSATOOLS_FFMPEG")))


__all__ = ["TranslatorSettings", "FfmpegSettings"]
