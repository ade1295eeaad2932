"""Tests for the generation request and the OpenRouter generator (HTTP mocked)."""

import base64

import pytest
import requests

import image_generator
from image_generator import (
    OpenRouterGenerator,
    build_generation_request,
    create_generator,
    image_to_data_url,
    save_generated_images,
)

PROMPT_CONFIG = {"finalPrompt": "A watch.", "negativePrompt": "blurry, text"}
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


def image_payload(*urls):
    return {"choices": [{"message": {"images": [{"image_url": {"url": u}} for u in urls]}}]}


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr(image_generator.time, "sleep", lambda s: None)
    monkeypatch.setattr(image_generator, "get_max_retries", lambda: 2)
    monkeypatch.setattr(image_generator, "get_timeout", lambda: 5)


class TestDataUrl:
    def test_urls_pass_through(self):
        assert image_to_data_url("https://example.com/a.png") == "https://example.com/a.png"
        assert image_to_data_url(PNG_DATA_URL) == PNG_DATA_URL

    def test_bytes_encoded(self, make_image_bytes):
        assert image_to_data_url(make_image_bytes(20, 20)).startswith("data:image/jpeg;base64,")
        rgba = make_image_bytes(20, 20, color=(0, 0, 0, 0), mode="RGBA")
        assert image_to_data_url(rgba).startswith("data:image/png;base64,")


class TestRequest:
    def test_build_generation_request(self):
        request = build_generation_request(PROMPT_CONFIG, ["https://x/ref.png"], {"quantity": 2})
        assert request == {
            "prompt": "A watch.",
            "negativePrompt": "blurry, text",
            "referenceImages": ["https://x/ref.png"],
            "settings": {"quantity": 2},
        }

    def test_messages(self):
        generator = OpenRouterGenerator(api_key="k", base_url="https://api.test/v1/", model="m")
        request = build_generation_request(PROMPT_CONFIG, ["https://x/ref.png"], {"aspect_ratio": "4:3"})
        content = generator._build_messages(request)[0]["content"]
        assert content[0]["text"] == "A watch.\n\nAvoid: blurry, text\n\nAspect ratio: 4:3"
        assert content[1]["image_url"]["url"] == "https://x/ref.png"
        assert generator.base_url == "https://api.test/v1"


class TestGenerate:
    def test_no_api_key(self, monkeypatch):
        monkeypatch.setattr(image_generator, "get_api_key", lambda: "")
        result = OpenRouterGenerator(base_url="https://api.test", model="m").generate(
            build_generation_request(PROMPT_CONFIG))
        assert result == {"success": False, "images": [], "error": "未配置 API Key"}

    def test_success_per_quantity(self, monkeypatch, no_sleep):
        calls = []

        def fake_post(url, headers, json, timeout):
            calls.append((url, json["model"], headers["Authorization"]))
            return FakeResponse(image_payload(PNG_DATA_URL))

        monkeypatch.setattr(image_generator.requests, "post", fake_post)
        generator = OpenRouterGenerator(api_key="k", base_url="https://api.test", model="m")
        result = generator.generate(build_generation_request(PROMPT_CONFIG, settings={"quantity": 2}))

        assert result["success"] is True
        assert result["images"] == [PNG_DATA_URL, PNG_DATA_URL]
        assert calls[0] == ("https://api.test/chat/completions", "m", "Bearer k")
        assert generator.get_stats() == {"call_count": 2}

    def test_retries_then_fails(self, monkeypatch, no_sleep):
        def failing_post(*args, **kwargs):
            raise requests.ConnectionError("boom")

        monkeypatch.setattr(image_generator.requests, "post", failing_post)
        generator = OpenRouterGenerator(api_key="k", base_url="https://api.test", model="m")
        result = generator.generate(build_generation_request(PROMPT_CONFIG))

        assert result["success"] is False
        assert result["error"] == "boom"
        assert generator.call_count == 2

    def test_empty_response_retried(self, monkeypatch, no_sleep):
        responses = [FakeResponse({"choices": []}), FakeResponse(image_payload("https://cdn/img.png"))]
        monkeypatch.setattr(image_generator.requests, "post", lambda *a, **k: responses.pop(0))
        result = OpenRouterGenerator(api_key="k", base_url="https://api.test", model="m").generate(
            build_generation_request(PROMPT_CONFIG))
        assert result["images"] == ["https://cdn/img.png"]


class TestHelpers:
    def test_create_generator(self, monkeypatch):
        monkeypatch.setattr(image_generator, "get_api_key", lambda: "k")
        assert isinstance(create_generator(), OpenRouterGenerator)
        assert isinstance(create_generator("something-else"), OpenRouterGenerator)

    def test_save_generated_images(self, tmp_path):
        paths = save_generated_images([PNG_DATA_URL], str(tmp_path / "out"))
        assert len(paths) == 1
        with open(paths[0], "rb") as f:
            assert f.read() == b"png-bytes"
