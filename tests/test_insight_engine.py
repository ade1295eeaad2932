"""Tests for the vision-model product insight (client faked)."""

import json
from types import SimpleNamespace

import pytest

import insight_engine
from insight_engine import analyze_product_image, parse_json_response

IMAGE = "data:image/png;base64,AAAA"

VALID = {
    "categoryName": "Smartwatch",
    "mappedCategory": "electronics",
    "features": ["waterproof"],
    "generatedPrompts": ["A sleek smartwatch"],
    "sizeCategory": "palm",
}


class FakeClient:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture(autouse=True)
def analysis_model(monkeypatch):
    monkeypatch.setattr(insight_engine, "get_analysis_model", lambda: "vision-model")


class TestParseJson:
    def test_plain(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}

    def test_surrounding_text(self):
        assert parse_json_response('Here you go: {"a": 1} hope it helps') == {"a": 1}

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_json_response("no json here")


class TestAnalyzeProductImage:
    def test_success(self):
        client = FakeClient(json.dumps(VALID))
        insight = analyze_product_image(IMAGE, {"name": "Watch", "description": "GPS"}, client=client)

        assert insight["mappedCategory"] == "electronics"
        assert insight["sizeReference"] == "fits comfortably in one palm"
        request = client.requests[0]
        assert request["model"] == "vision-model"
        content = request["messages"][0]["content"]
        assert 'Watch' in content[0]["text"]
        assert content[1]["image_url"]["url"] == IMAGE

    def test_malformed_response_uses_default(self):
        insight = analyze_product_image(IMAGE, client=FakeClient('{"categoryName": "x"}'))
        assert insight["mappedCategory"] == "other"

    def test_not_json_uses_default(self):
        insight = analyze_product_image(IMAGE, client=FakeClient("sorry, I cannot help"))
        assert insight["categoryName"] == "General Product"

    def test_client_error_uses_default(self):
        insight = analyze_product_image(IMAGE, client=FakeClient(error=OSError("network down")))
        assert insight["mappedCategory"] == "other"

    def test_no_key_no_client(self, monkeypatch):
        monkeypatch.setattr(insight_engine, "get_api_key", lambda: "")
        assert analyze_product_image(IMAGE)["mappedCategory"] == "other"
