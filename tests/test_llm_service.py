"""Tests for the Ollama-compatible LLM client."""

import pytest
import requests

from core.exceptions import UpstreamError
from services.llm_service import LLMService


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=False):
        self.payload = payload
        self.status_code = status_code
        self.text = "error body"
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(response=self)

    def json(self):
        if self.json_error:
            raise ValueError("not json")
        return self.payload


@pytest.fixture
def llm():
    return LLMService("http://llm.local:11434/", "test-model", timeout=5)


def patch_post(monkeypatch, result):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(requests, "post", fake_post)
    return calls


def test_generate_success(llm, monkeypatch):
    calls = patch_post(monkeypatch, FakeResponse({"response": "  Hello  "}))

    assert llm.generate("Say hello") == "Hello"
    assert calls == [(
        "http://llm.local:11434/api/generate",
        {"model": "test-model", "prompt": "Say hello", "stream": False},
        5,
    )]


def test_empty_prompt(llm, monkeypatch):
    calls = patch_post(monkeypatch, FakeResponse({"response": "x"}))

    with pytest.raises(UpstreamError):
        llm.generate("   ")
    assert calls == []


@pytest.mark.parametrize("result", [
    requests.exceptions.Timeout(),
    requests.exceptions.ConnectionError(),
    FakeResponse(status_code=500),
    FakeResponse(json_error=True),
    FakeResponse({"response": "   "}),
    FakeResponse({"unexpected": True}),
    FakeResponse(["not", "a", "dict"]),
    FakeResponse({"response": 42}),
])
def test_failures_raise_upstream_error(llm, monkeypatch, result):
    patch_post(monkeypatch, result)

    with pytest.raises(UpstreamError):
        llm.generate("prompt")
