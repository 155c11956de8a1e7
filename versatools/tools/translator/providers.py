"""HTTP translation providers used by :mod:`versatools.tools.translator`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ...config import TranslatorSettings
from ...core.utils import get_logger
from ...errors import ProcessingError

_LOGGER = get_logger("versatools.translator")

SYSTEM_PROMPT = " ".join(
    [
        "You are a professional translation engine.",
        "Translate the user content into the target language only.",
        "Do not add explanations or quotes, respond with translated text only.",
    ]
)
TEMPERATURE = 0.2


@dataclass(frozen=True)
class Translation:
    lang: str
    text: str

    def as_dict(self) -> dict[str, str]:
        return {"lang": self.lang, "text": self.text}


class TranslationProvider(Protocol):
    name: str

    def translate(self, client: httpx.Client, text: str, *, source_lang: str, target_lang: str) -> str: ...


def _user_prompt(text: str, source_lang: str, target_lang: str) -> str:
    return "\n".join(
        [
            f"Source language: {source_lang or 'auto'}",
            f"Target language: {target_lang or 'zh'}",
            "Text:",
            text,
        ]
    )


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


@dataclass(frozen=True)
class ChatCompletionProvider:
    """OpenAI-compatible chat completion endpoint (DeepSeek, OpenAI)."""

    name: str
    api_key: str
    base_url: str
    model: str

    def translate(self, client: httpx.Client, text: str, *, source_lang: str, target_lang: str) -> str:
        response = client.post(
            f"{self.base_url.rstrip('/')}/v1/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": _user_prompt(text, source_lang, target_lang)},
                ],
                "temperature": TEMPERATURE,
            },
        )
        if response.is_error:
            _LOGGER.error("%s translation failed with status %s", self.name, response.status_code)
            raise ProcessingError("AI translation request failed")

        choices = _json_or_empty(response).get("choices") or []
        content = None
        if choices and isinstance(choices[0], dict):
            content = (choices[0].get("message") or {}).get("content")
        if isinstance(content, str) and content.strip():
            return content.strip()
        return text


@dataclass(frozen=True)
class EndpointProvider:
    """Generic LibreTranslate-style endpoint taking ``q``/``source``/``target``."""

    url: str
    api_key: str | None = None
    name: str = "custom-api"

    def translate(self, client: httpx.Client, text: str, *, source_lang: str, target_lang: str) -> str:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        response = client.post(
            self.url,
            headers=headers,
            json={
                "q": text,
                "source": source_lang or "auto",
                "target": target_lang or "zh",
                "format": "text",
            },
        )
        if response.is_error:
            _LOGGER.error("Translation endpoint failed with status %s", response.status_code)
            raise ProcessingError("Translation service request failed")

        translated = _json_or_empty(response).get("translatedText")
        if isinstance(translated, str) and translated:
            return translated
        return text


def select_provider(settings: TranslatorSettings) -> TranslationProvider | None:
    """Pick the first configured provider, or ``None`` for pass-through."""

    if settings.deepseek_api_key:
        return ChatCompletionProvider(
            name=f"deepseek:{settings.deepseek_model}",
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=settings.deepseek_model,
        )
    if settings.openai_api_key:
        return ChatCompletionProvider(
            name=f"openai:{settings.openai_model}",
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
        )
    if settings.translate_api_url:
        return EndpointProvider(url=settings.translate_api_url, api_key=settings.translate_api_key)
    return None


__all__ = [
    "Translation",
    "TranslationProvider",
    "ChatCompletionProvider",
    "EndpointProvider",
    "select_provider",
]
