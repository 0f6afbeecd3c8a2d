import base64

import pytest

from fri.config import Settings
from fri.errors import ImageValidationError, ServiceError
from fri.ocr.client import (
    IMAGE_TOO_LARGE_ERROR,
    NO_TEXT_SENTINEL,
    NOT_AN_IMAGE_ERROR,
    FunctionsOcrBackend,
    OcrClient,
    parse_data_url,
    to_data_url,
    validate_image,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class FakeOcrBackend:
    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {"text": ""}
        self.error = error
        self.calls = []

    def read(self, image_data_url):
        self.calls.append(image_data_url)
        if self.error is not None:
            raise self.error
        return self.payload


class FakeFunctions:
    def __init__(self):
        self.calls = []

    def invoke(self, function_name, body):
        self.calls.append((function_name, body))
        return {"text": "hello"}


def _client(backend, **settings) -> OcrClient:
    return OcrClient(settings=Settings(**settings), backend=backend)


def test_validate_image_rejects_non_images():
    with pytest.raises(ImageValidationError) as exc_info:
        validate_image("application/pdf", 10)
    assert exc_info.value.message == NOT_AN_IMAGE_ERROR
    with pytest.raises(ImageValidationError):
        validate_image(None, 10)


def test_validate_image_rejects_files_over_ten_mebibytes():
    validate_image("image/png", 10 * 1024 * 1024)
    with pytest.raises(ImageValidationError) as exc_info:
        validate_image("image/png", 10 * 1024 * 1024 + 1)
    assert exc_info.value.message == IMAGE_TOO_LARGE_ERROR


def test_read_image_rejects_before_any_call():
    backend = FakeOcrBackend({"text": "x"})
    client = _client(backend, MAX_IMAGE_BYTES=4)
    with pytest.raises(ImageValidationError):
        client.read_image(PNG_BYTES, "image/png")
    with pytest.raises(ImageValidationError):
        client.read_image(b"x", "text/plain")
    assert backend.calls == []


def test_read_image_sends_data_url_and_normalizes_text():
    backend = FakeOcrBackend({"text": "  ด่วน!\u200b  ช่วยด้วย \n โทร 0812345678  "})
    text = _client(backend).read_image(PNG_BYTES, "image/png")
    assert text == "ด่วน! ช่วยด้วย \n โทร 0812345678"
    assert backend.calls == [to_data_url(PNG_BYTES, "image/png")]
    assert backend.calls[0].startswith("data:image/png;base64,")


@pytest.mark.parametrize("payload", [{"text": NO_TEXT_SENTINEL}, {"text": "  "}, {}])
def test_read_image_returns_none_when_no_text(payload):
    assert _client(FakeOcrBackend(payload)).read_image(PNG_BYTES, "image/jpeg") is None


def test_read_image_error_payload_raises():
    with pytest.raises(ServiceError):
        _client(FakeOcrBackend({"error": "model overloaded"})).read_image(PNG_BYTES, "image/png")


def test_data_url_round_trip():
    image = parse_data_url(to_data_url(PNG_BYTES, "image/webp"))
    assert image.mime_type == "image/webp"
    assert base64.b64decode(image.data) == PNG_BYTES


def test_parse_data_url_rejects_plain_urls():
    with pytest.raises(ValueError):
        parse_data_url("https://example.com/a.png")


def test_functions_ocr_backend_sends_image_body():
    functions = FakeFunctions()
    backend = FunctionsOcrBackend(settings=Settings(), functions=functions)
    assert backend.read("data:image/png;base64,AAAA") == {"text": "hello"}
    assert functions.calls == [("ocr-image", {"image": "data:image/png;base64,AAAA"})]
