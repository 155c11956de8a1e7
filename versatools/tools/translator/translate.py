"""Engine translating a text field into one or two target languages."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ...config import TranslatorSettings
from ...core.utils import get_logger, iter_bytes
from ...errors import ProcessingError
from ..common.interfaces import (
    EngineInput,
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    as_tool_input,
    estimate_duration,
    validate_options,
)
from .providers import Translation, select_provider

LOGGER = get_logger("versatools.tools.translate")

TEXT_FIELD = "text"


class TranslateOptions(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    source_lang: str = Field("auto", alias="sourceLang")
    target_lang: str = Field("zh", alias="targetLang")
    target_lang2: Optional[str] = Field(None, alias="targetLang2")

    def targets(self) -> list[str]:
        seen: list[str] = []
        for lang in (self.target_lang, self.target_lang2):
            if isinstance(lang, str) and lang.strip() and lang not in seen:
                seen.append(lang)
        return seen


class TextTranslator:
    kind = EngineKind.TEXT_TRANSLATOR
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 0.1
    options_model = TranslateOptions

    def __init__(
        self,
        settings_loader: Callable[[], TranslatorSettings] = TranslatorSettings.from_env,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings_loader = settings_loader
        self._transport = transport

    def validate(self, raw_options: Any) -> TranslateOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def _translate_all(
        self, text: str, options: TranslateOptions, targets: list[str]
    ) -> tuple[list[Translation], str | None]:
        settings = self._settings_loader()
        provider = select_provider(settings)
        if provider is None:
            LOGGER.debug("No translation service configured; echoing input")
            return [Translation(lang, text) for lang in targets], None

        results: list[Translation] = []
        try:
            with httpx.Client(timeout=settings.timeout, transport=self._transport) as client:
                for target in targets:
                    translated = provider.translate(
                        client, text, source_lang=options.source_lang, target_lang=target
                    )
                    results.append(Translation(target, translated))
        except httpx.HTTPError as exc:
            raise ProcessingError(f"Translation request failed: {exc}") from exc
        return results, provider.name

    def process(self, data: EngineInput, options: TranslateOptions) -> ExecutionResult:
        text = as_tool_input(data, self.tool_id).get_text(TEXT_FIELD)
        if text is None or not text.strip():
            raise ProcessingError("No text provided")

        targets = options.targets()
        if not targets:
            raise ProcessingError("No target language provided")

        results, service_name = self._translate_all(text, options, targets)
        payload = json.dumps(
            {"results": [item.as_dict() for item in results], "sourceLang": options.source_lang or "auto"},
            ensure_ascii=False,
        ).encode("utf-8")

        LOGGER.debug("Translated %d characters into %s via %s", len(text), targets, service_name or "identity")

        return ExecutionResult(
            output_stream=iter_bytes(payload),
            metadata={
                "originalTextLength": len(text),
                "translatedTextLength": sum(len(item.text) for item in results),
                "sourceLang": options.source_lang,
                "targetLangs": targets,
                "mimeType": "application/json; charset=utf-8",
                "fileName": "translations.json",
                "usedExternalService": service_name is not None,
                "serviceConfigured": service_name is not None,
                "serviceName": service_name,
            },
        )
