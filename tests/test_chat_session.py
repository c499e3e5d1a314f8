"""Tests for the multi-turn conversation loop against a scripted model."""
import json
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from app.core.errors import TextGenerationError
from app.core.progress import RecordingReporter, StepKind
from app.llm.chat import SYSTEM_INSTRUCTION, ChatSession
from app.llm.client import GeminiClient
from app.llm.tools import ProjectTools


def _text(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def _call(name, **args):
    return {"candidates": [{"content": {"role": "model", "parts": [
        {"functionCall": {"name": name, "args": args}},
    ]}}]}


class ScriptedModel:
    """Answers each request with the next canned body and keeps what was sent."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if not self.responses:
            return httpx.Response(500, text="script exhausted")
        return httpx.Response(200, json=self.responses.pop(0))


def _session(tmp_path: Path, model: ScriptedModel, **kwargs) -> ChatSession:
    client = GeminiClient(
        api_key="test-key",
        model="gemini-test",
        api_base="https://gemini.example/v1beta",
        transport=httpx.MockTransport(model),
    )
    tools = ProjectTools(tmp_path, MagicMock(return_value="Tables: songs"))
    return ChatSession(client, tools, **kwargs)


def test_tool_call_then_answer(tmp_path: Path):
    (tmp_path / "package.json").write_text("{}", encoding="utf-8")
    model = ScriptedModel([_call("list_files", path="."), _text("You have a package.json.")])
    session = _session(tmp_path, model)

    reply = session.send("what is in my project?")

    assert reply == "You have a package.json."
    assert [m["role"] for m in session.history] == ["user", "model", "function", "model"]
    assert session.history[1]["parts"] == [{"functionCall": {"name": "list_files", "args": {"path": "."}}}]
    response = session.history[2]["parts"][0]["functionResponse"]
    assert response == {
        "name": "list_files",
        "response": {"result": "Files and directories in '.':\npackage.json"},
    }
    assert len(model.requests) == 2
    assert model.requests[1]["contents"] == session.history[:3]
    assert model.requests[0]["systemInstruction"] == {"parts": [{"text": SYSTEM_INSTRUCTION}]}
    declared = [d["name"] for d in model.requests[0]["tools"][0]["functionDeclarations"]]
    assert "implement_database_feature" in declared


def test_history_carries_over_between_messages(tmp_path: Path):
    model = ScriptedModel([_text("Hello."), _text("You said hi.")])
    session = _session(tmp_path, model)

    session.send("hi")
    session.send("what did I say?")

    assert [m["parts"][0]["text"] for m in model.requests[1]["contents"]] == ["hi", "Hello.", "what did I say?"]


def test_clear_resets_history(tmp_path: Path):
    model = ScriptedModel([_text("Hello."), _text("Fresh start.")])
    session = _session(tmp_path, model)

    session.send("hi")
    session.clear()
    session.send("again")

    assert session.history == [
        {"role": "user", "parts": [{"text": "again"}]},
        {"role": "model", "parts": [{"text": "Fresh start."}]},
    ]
    assert model.requests[1]["contents"] == [{"role": "user", "parts": [{"text": "again"}]}]


def test_tool_rounds_are_capped(tmp_path: Path):
    model = ScriptedModel([_call("analyze_project")] * 5)
    reporter = RecordingReporter()
    session = _session(tmp_path, model, max_tool_rounds=3, reporter=reporter)

    reply = session.send("keep going")

    assert len(model.requests) == 4
    assert reply == "Stopped after 3 tool call(s) without a final answer."
    assert [m["role"] for m in session.history] == ["user"] + ["model", "function"] * 3 + ["model"]
    assert reporter.events[-1].kind == StepKind.WARNING


def test_escaping_path_is_answered_with_an_error(tmp_path: Path):
    project = tmp_path / "project"
    project.mkdir()
    (tmp_path / "secret.txt").write_text("token", encoding="utf-8")
    model = ScriptedModel([_call("read_file", filepath="../secret.txt"), _text("I cannot read that.")])
    session = _session(project, model)

    assert session.send("read ../secret.txt") == "I cannot read that."

    result = session.history[2]["parts"][0]["functionResponse"]["response"]["result"]
    assert result.startswith("Error executing read_file: ")
    assert "token" not in json.dumps(model.requests)


def test_failed_request_leaves_history_unchanged(tmp_path: Path):
    model = ScriptedModel([_text("Hello.")])
    session = _session(tmp_path, model)
    session.send("hi")
    before = list(session.history)

    with pytest.raises(TextGenerationError):
        session.send("second message")

    assert session.history == before
