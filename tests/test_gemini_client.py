"""Tests for the Gemini text-generation client."""
import json

import httpx
import pytest

from app.core.config import settings
from app.core.errors import TextGenerationError
from app.llm.client import GeminiClient, get_text_generator


def _client(handler):
    return GeminiClient(
        api_key="test-key",
        model="gemini-test",
        api_base="https://gemini.example/v1beta",
        transport=httpx.MockTransport(handler),
    )


def test_generate_returns_candidate_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "candidates": [{"content": {"parts": [{"text": "[{\"tableName\": "}, {"text": "\"songs\"}]"}]}}],
        })

    text = _client(handler).generate("plan songs")

    assert text == '[{"tableName": "songs"}]'
    assert seen["url"] == "https://gemini.example/v1beta/models/gemini-test:generateContent?key=test-key"
    assert seen["body"] == {"contents": [{"role": "user", "parts": [{"text": "plan songs"}]}]}


def test_http_error_becomes_text_generation_error():
    client = _client(lambda request: httpx.Response(503, text="overloaded"))

    with pytest.raises(TextGenerationError) as exc:
        client.generate("anything")

    assert "HTTP 503" in str(exc.value)


def test_connection_error_becomes_text_generation_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TextGenerationError) as exc:
        _client(handler).generate("anything")

    assert "request failed" in str(exc.value)


def test_blocked_prompt_has_no_candidates():
    client = _client(lambda request: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))

    with pytest.raises(TextGenerationError) as exc:
        client.generate("anything")

    assert "no candidates (SAFETY)" in str(exc.value)


def test_non_json_body_is_an_error():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(TextGenerationError):
        client.generate("anything")


def test_get_text_generator_depends_on_api_key(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", None)
    assert get_text_generator() is None

    monkeypatch.setattr(settings, "gemini_api_key", "k")
    generator = get_text_generator()
    assert isinstance(generator, GeminiClient)
    assert generator.api_key == "k"


def test_generate_content_sends_history_tools_and_instruction():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": [{"content": {"role": "model", "parts": [
            {"text": "Let me look."},
            {"functionCall": {"name": "list_files", "args": {"path": "src"}}},
        ]}}]})

    history = [{"role": "user", "parts": [{"text": "what is in src?"}]}]
    tools = [{"name": "list_files", "parameters": {"type": "OBJECT", "properties": {}}}]

    turn = _client(handler).generate_content(history, tools=tools, system_instruction="be brief")

    assert turn.text == "Let me look."
    assert [(c.name, c.args) for c in turn.function_calls] == [("list_files", {"path": "src"})]
    assert seen["body"]["contents"] == history
    assert seen["body"]["tools"] == [{"functionDeclarations": tools}]
    assert seen["body"]["systemInstruction"] == {"parts": [{"text": "be brief"}]}
    assert seen["body"]["toolConfig"] == {"functionCallingConfig": {"mode": "AUTO"}}


def test_generate_content_without_tools_sends_only_contents():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "hi"}]}}]})

    turn = _client(handler).generate_content([{"role": "user", "parts": [{"text": "hello"}]}])

    assert turn.text == "hi"
    assert turn.function_calls == []
    assert set(seen["body"]) == {"contents"}
