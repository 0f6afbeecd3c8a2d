import json

import httpx
import pytest

from fri.config import Settings
from fri.errors import ServiceError
from fri.extraction.client import GeminiExtractionBackend
from fri.extraction.gemini import (
    GeminiClient,
    InlineImage,
    _extract_json_string,
    _strip_code_fences,
)
from fri.extraction.schemas import ExtractionOutput


def _settings(**overrides) -> Settings:
    values = {"GOOGLE_API_KEY": "test-key", "LLM_MAX_ATTEMPTS": 2}
    values.update(overrides)
    return Settings(**values)


def _gemini_response(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_strip_code_fences():
    assert _strip_code_fences('```json\n{"reports": []}\n```') == '{"reports": []}'


def test_extract_json_string_finds_embedded_object():
    assert _extract_json_string('Here you go: {"reports": []} thanks') == '{"reports": []}'
    with pytest.raises(ValueError):
        _extract_json_string("no json here")


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        GeminiClient(Settings(GOOGLE_API_KEY=None))


def test_generate_structured_retries_with_repair_suffix():
    prompts = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        prompts.append(body["contents"][0]["parts"][0]["text"])
        if len(prompts) == 1:
            return _gemini_response("not json")
        return _gemini_response('```json\n{"reports": [{"name": "สมชาย"}]}\n```')

    client = GeminiClient(_settings(), transport=httpx.MockTransport(handler))
    output, _latency, attempts, error = client.generate_structured("PROMPT", ExtractionOutput)
    assert error is None
    assert attempts == 2
    assert output.reports[0].name == "สมชาย"
    assert prompts[1].startswith("PROMPT") and "Return ONLY a single JSON object" in prompts[1]


def test_generate_structured_reports_last_error():
    client = GeminiClient(
        _settings(LLM_MAX_ATTEMPTS=1),
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    output, _latency, attempts, error = client.generate_structured("PROMPT", ExtractionOutput)
    assert output is None
    assert attempts == 1
    assert error


def test_generate_text_sends_inline_image():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen["parts"] = body["contents"][0]["parts"]
        seen["config"] = body["generationConfig"]
        seen["key"] = request.url.params["key"]
        return _gemini_response("ด่วน! ช่วยด้วย")

    client = GeminiClient(_settings(), transport=httpx.MockTransport(handler))
    text = client.generate_text("READ", image=InlineImage(mime_type="image/png", data="AAAA"))
    assert text == "ด่วน! ช่วยด้วย"
    assert seen["parts"][1] == {"inline_data": {"mime_type": "image/png", "data": "AAAA"}}
    assert "responseMimeType" not in seen["config"]
    assert seen["key"] == "test-key"


def test_generate_text_wraps_http_errors():
    client = GeminiClient(
        _settings(), transport=httpx.MockTransport(lambda request: httpx.Response(500))
    )
    with pytest.raises(ServiceError):
        client.generate_text("READ")


def test_gemini_extraction_backend_returns_reports_payload():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert "INPUT:\nน้ำท่วม" in body["contents"][0]["parts"][0]["text"]
        return _gemini_response('{"reports": [{"name": "สมชาย", "phone": ["0812345678"]}]}')

    settings = _settings()
    client = GeminiClient(settings, transport=httpx.MockTransport(handler))
    backend = GeminiExtractionBackend(settings, client=client)
    payload = backend.extract("น้ำท่วม")
    assert payload["reports"][0]["name"] == "สมชาย"
    assert payload["reports"][0]["phone"] == ["0812345678"]


def test_gemini_extraction_backend_raises_on_failure():
    settings = _settings(LLM_MAX_ATTEMPTS=1)
    client = GeminiClient(settings, transport=httpx.MockTransport(lambda r: _gemini_response("???")))
    backend = GeminiExtractionBackend(settings, client=client)
    with pytest.raises(ServiceError):
        backend.extract("น้ำท่วม")


def test_gemini_backend_without_api_key_raises_service_error_on_use():
    backend = GeminiExtractionBackend(Settings(GOOGLE_API_KEY=None))
    with pytest.raises(ServiceError) as exc_info:
        backend.extract("น้ำท่วม")
    assert "GOOGLE_API_KEY" in exc_info.value.message
