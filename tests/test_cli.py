"""Tests for the command-line entry point."""
import io
import json
from pathlib import Path
from unittest.mock import MagicMock

import httpx

from app import cli
from app.core import commands
from app.core.errors import TextGenerationError
from app.llm.client import GeminiClient
from app.planning.types import WorkflowSummary


def test_parser_defaults():
    args = cli.build_parser().parse_args(["store", "recently", "played", "songs"])

    assert args.query == ["store", "recently", "played", "songs"]
    assert not args.interactive
    assert not args.verbose
    assert isinstance(args.project_dir, Path)


def test_main_requires_query():
    assert cli.main([]) == 2


def test_run_query_end_to_end(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli, "get_text_generator", lambda: None)
    monkeypatch.setattr(commands, "run_command", MagicMock(return_value=""))
    out = io.StringIO()

    status = cli.run_query("store the recently played songs", tmp_path, out)

    assert status == 0
    printed = out.getvalue()
    assert "Tables: recently_played" in printed
    assert "    src/db/schema/recently-played.ts" in printed
    assert "UI sections: Recently Played" in printed
    assert (tmp_path / "src/app/api/recently-played/route.ts").is_file()


def test_run_query_planning_failure(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli, "get_text_generator", lambda: None)
    out = io.StringIO()

    assert cli.run_query("make me a sandwich", tmp_path, out) == 1
    assert out.getvalue().startswith("Error: No database schema requirements detected")


def test_run_query_reports_table_failures(tmp_path: Path, monkeypatch):
    workflow = MagicMock()
    workflow.return_value.run.return_value = WorkflowSummary(query="q", failures={"songs": "gave up"})
    monkeypatch.setattr(cli, "FeatureWorkflow", workflow)
    monkeypatch.setattr(cli, "get_text_generator", lambda: None)
    out = io.StringIO()

    assert cli.run_query("q", tmp_path, out) == 1
    assert "Failed: songs: gave up" in out.getvalue()


def test_run_query_other_errors(tmp_path: Path, monkeypatch):
    workflow = MagicMock()
    workflow.return_value.run.side_effect = TextGenerationError("service down")
    monkeypatch.setattr(cli, "FeatureWorkflow", workflow)
    monkeypatch.setattr(cli, "get_text_generator", lambda: None)
    out = io.StringIO()

    assert cli.run_query("q", tmp_path, out) == 2
    assert "Error: service down" in out.getvalue()


def test_interactive_runs_until_exit(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(cli, "get_text_generator", lambda: None)
    run_query = MagicMock(return_value=0)
    monkeypatch.setattr(cli, "run_query", run_query)
    stdin = io.StringIO("\nstore liked songs\nexit\nnever reached\n")
    out = io.StringIO()

    assert cli.interactive(tmp_path, stdin, out) == 0

    run_query.assert_called_once_with("store liked songs", tmp_path, out)
    assert "Type 'exit' to quit" in out.getvalue()


def test_interactive_conversation_with_generator(tmp_path: Path, monkeypatch):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        sent.append(body["contents"])
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [
            {"text": f"reply {len(sent)}"},
        ]}}]})

    client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler))
    monkeypatch.setattr(cli, "get_text_generator", lambda: client)
    run_query = MagicMock(return_value=0)
    monkeypatch.setattr(cli, "run_query", run_query)
    stdin = io.StringIO("hello\nclear\nstore liked songs\nquit\n")
    out = io.StringIO()

    assert cli.interactive(tmp_path, stdin, out) == 0

    printed = out.getvalue()
    assert "'clear' to reset the conversation" in printed
    assert "reply 1" in printed
    assert "Conversation history cleared." in printed
    assert "reply 2" in printed
    assert sent[1] == [{"role": "user", "parts": [{"text": "store liked songs"}]}]
    run_query.assert_not_called()


def test_interactive_conversation_reports_service_errors(tmp_path: Path, monkeypatch):
    client = GeminiClient(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    monkeypatch.setattr(cli, "get_text_generator", lambda: client)
    out = io.StringIO()

    assert cli.interactive(tmp_path, io.StringIO("hello\n"), out) == 2
    assert "returned HTTP 503" in out.getvalue()


def test_chat_session_feature_tool_runs_workflow(tmp_path: Path, monkeypatch):
    workflow = MagicMock()
    workflow.return_value.run.return_value = WorkflowSummary(query="q", failures={"songs": "gave up"})
    monkeypatch.setattr(cli, "FeatureWorkflow", workflow)
    client = GeminiClient(api_key="k")

    session = cli.build_chat_session(client, tmp_path)
    result = session.tools.dispatch("implement_database_feature", {"query": "store songs"})

    workflow.assert_called_once_with(project_dir=tmp_path, generator=client)
    workflow.return_value.run.assert_called_once_with("store songs")
    assert "Failed: songs: gave up" in result

def test_main_interactive_flag(tmp_path: Path, monkeypatch):
    interactive = MagicMock(return_value=0)
    monkeypatch.setattr(cli, "interactive", interactive)

    assert cli.main(["-i", "--project-dir", str(tmp_path)]) == 0
    interactive.assert_called_once_with(tmp_path)
