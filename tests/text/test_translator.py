from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from versatools import ProcessingError, ToolInput
from versatools.config import TranslatorSettings
from versatools.tools.translator import ChatCompletionProvider, EndpointProvider, TextTranslator, select_provider


def _translator(settings: TranslatorSettings, handler: Callable[[httpx.Request], httpx.Response] | None = None):
    transport = httpx.MockTransport(handler) if handler else None
    return TextTranslator(settings_loader=lambda: settings, transport=transport)


def _run(engine: TextTranslator, text: str, options: dict) -> tuple[dict, dict]:
    result = engine.process(ToolInput().add("text", text), engine.validate(options))
    return json.loads(b"".join(result.output_stream).decode("utf-8")), result.metadata


def test_identity_fallback_without_provider() -> None:
    payload, metadata = _run(_translator(TranslatorSettings()), "hello", {"targetLang": "en", "targetLang2": "ja"})

    assert payload == {
        "results": [{"lang": "en", "text": "hello"}, {"lang": "ja", "text": "hello"}],
        "sourceLang": "auto",
    }
    assert metadata["usedExternalService"] is False
    assert metadata["serviceConfigured"] is False
    assert metadata["serviceName"] is None
    assert metadata["mimeType"].startswith("application/json")


def test_duplicate_target_is_translated_once() -> None:
    payload, _ = _run(_translator(TranslatorSettings()), "hi", {"targetLang": "fr", "targetLang2": "fr"})
    assert [item["lang"] for item in payload["results"]] == ["fr"]


def test_default_target_language() -> None:
    payload, metadata = _run(_translator(TranslatorSettings()), "hi", {})
    assert payload["results"] == [{"lang": "zh", "text": "hi"}]
    assert metadata["targetLangs"] == ["zh"]


def test_deepseek_chat_completion() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": " 你好 "}}]})

    settings = TranslatorSettings(deepseek_api_key="secret")
    payload, metadata = _run(_translator(settings, handler), "hello", {"sourceLang": "en"})

    assert payload["results"] == [{"lang": "zh", "text": "你好"}]
    assert payload["sourceLang"] == "en"
    assert metadata["serviceName"] == "deepseek:deepseek-chat"
    assert metadata["usedExternalService"] is True

    request = seen[0]
    assert str(request.url) == "https://api.deepseek.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer secret"
    body = json.loads(request.content)
    assert body["model"] == "deepseek-chat"
    assert body["temperature"] == 0.2
    assert "Target language: zh" in body["messages"][1]["content"]


def test_empty_completion_falls_back_to_input() -> None:
    settings = TranslatorSettings(openai_api_key="key")
    engine = _translator(settings, lambda request: httpx.Response(200, json={"choices": []}))
    payload, _ = _run(engine, "unchanged", {})
    assert payload["results"][0]["text"] == "unchanged"


def test_provider_error_status_fails() -> None:
    settings = TranslatorSettings(deepseek_api_key="secret")
    engine = _translator(settings, lambda request: httpx.Response(500, json={"error": "boom"}))
    with pytest.raises(ProcessingError, match="AI translation request failed"):
        _run(engine, "hello", {})


def test_transport_error_fails() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    engine = _translator(TranslatorSettings(translate_api_url="http://translate.local/api"), handler)
    with pytest.raises(ProcessingError, match="Translation request failed"):
        _run(engine, "hello", {})


def test_custom_endpoint() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"translatedText": "hola"})

    settings = TranslatorSettings(translate_api_url="http://translate.local/api")
    payload, metadata = _run(_translator(settings, handler), "hello", {"targetLang": "es"})

    assert payload["results"] == [{"lang": "es", "text": "hola"}]
    assert metadata["serviceName"] == "custom-api"
    assert seen == [{"q": "hello", "source": "auto", "target": "es", "format": "text"}]


def test_missing_text_fails() -> None:
    engine = _translator(TranslatorSettings())
    with pytest.raises(ProcessingError, match="No text provided"):
        engine.process(ToolInput(), engine.validate({}))


def test_provider_precedence() -> None:
    everything = TranslatorSettings(
        deepseek_api_key="d", openai_api_key="o", translate_api_url="http://translate.local"
    )
    assert select_provider(everything).name == "deepseek:deepseek-chat"

    openai = select_provider(TranslatorSettings(openai_api_key="o", translate_api_url="http://translate.local"))
    assert isinstance(openai, ChatCompletionProvider)
    assert openai.name == "openai:gpt-4.1-mini"

    endpoint = select_provider(TranslatorSettings(translate_api_url="http://translate.local", translate_api_key="k"))
    assert isinstance(endpoint, EndpointProvider)
    assert endpoint.api_key == "k"

    assert select_provider(TranslatorSettings()) is None


def test_settings_from_environment() -> None:
    settings = TranslatorSettings.from_env(
        {
            "OPENAI_API_KEY": " key ",
            "OPENAI_API_BASE_URL": "https://proxy.local",
            "DEEPSEEK_API_KEY": "",
            "VERSATOOLS_TRANSLATE_TIMEOUT": "5",
        }
    )
    assert settings.openai_api_key == "key"
    assert settings.openai_base_url == "https://proxy.local"
    assert settings.deepseek_api_key is None
    assert settings.timeout == 5.0
