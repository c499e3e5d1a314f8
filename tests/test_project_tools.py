"""Tests for the tools exposed to the conversational agent."""
import json
from pathlib import Path
from unittest.mock import MagicMock

from app.core.errors import ExternalToolFailure, PlanningFailure
from app.llm.tools import READ_LIMIT, TOOL_DECLARATIONS, ProjectTools


def _tools(root: Path, run_feature=None, run_command=None) -> ProjectTools:
    return ProjectTools(root, run_feature or MagicMock(return_value="done"), run_command=run_command)


def _project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "src" / "db" / "schema").mkdir(parents=True)
    (root / "src" / "db" / "schema" / "songs.ts").write_text("export const songs = 1;\n", encoding="utf-8")
    (root / "package.json").write_text("{}", encoding="utf-8")
    return root


def test_declarations_match_handlers(tmp_path: Path):
    tools = _tools(tmp_path)

    assert [d["name"] for d in TOOL_DECLARATIONS] == list(tools._handlers)


def test_list_and_read_files(tmp_path: Path):
    tools = _tools(_project(tmp_path))

    listing = tools.dispatch("list_files", {"path": "src/db"})
    content = tools.dispatch("read_file", {"filepath": "src/db/schema/songs.ts"})

    assert listing == "Files and directories in 'src/db':\nschema/"
    assert content == "export const songs = 1;\n"


def test_read_file_is_truncated(tmp_path: Path):
    root = _project(tmp_path)
    (root / "big.txt").write_text("x" * (READ_LIMIT + 10), encoding="utf-8")

    content = _tools(root).dispatch("read_file", {"filepath": "big.txt"})

    assert content.startswith("x" * READ_LIMIT)
    assert content.endswith(f"(truncated, {READ_LIMIT + 10} characters total)")


def test_paths_outside_project_are_refused(tmp_path: Path):
    root = _project(tmp_path)
    (tmp_path / "secret.txt").write_text("token", encoding="utf-8")
    tools = _tools(root)

    for name, args in [
        ("read_file", {"filepath": "../secret.txt"}),
        ("read_file", {"filepath": str(tmp_path / "secret.txt")}),
        ("list_files", {"path": ".."}),
        ("write_file", {"filepath": "../../escaped.ts", "content": "x"}),
        ("execute_command", {"command": "ls", "directory": "../"}),
    ]:
        result = tools.dispatch(name, args)

        assert result.startswith(f"Error executing {name}: "), name
        assert "outside the project directory" in result
    assert not (tmp_path.parent / "escaped.ts").exists()


def test_write_file_inside_project(tmp_path: Path):
    root = _project(tmp_path)

    result = _tools(root).dispatch("write_file", {"filepath": "src/lib/util.ts", "content": "export {};\n"})

    assert result == "Successfully wrote 11 characters to src/lib/util.ts"
    assert (root / "src/lib/util.ts").read_text(encoding="utf-8") == "export {};\n"


def test_execute_command_runs_without_shell_in_project(tmp_path: Path):
    root = _project(tmp_path)
    runner = MagicMock(return_value="ok\n")

    result = _tools(root, run_command=runner).dispatch(
        "execute_command", {"command": "npx drizzle-kit generate --name 'add songs'", "directory": "src"},
    )

    assert result == "ok\n"
    runner.assert_called_once_with(["npx", "drizzle-kit", "generate", "--name", "add songs"], root.resolve() / "src")


def test_failed_command_is_reported_as_text(tmp_path: Path):
    runner = MagicMock(side_effect=ExternalToolFailure(["npm", "test"], 1, "1 failing"))

    result = _tools(_project(tmp_path), run_command=runner).dispatch("execute_command", {"command": "npm test"})

    assert result == "Command failed: `npm test` exited with 1\n1 failing"


def test_analyze_project(tmp_path: Path):
    analysis = json.loads(_tools(_project(tmp_path)).dispatch("analyze_project", {}))

    assert analysis["has_package_json"] is True
    assert analysis["has_drizzle_config"] is False
    assert "songs" in analysis["context"]


def test_implement_feature_errors_become_text(tmp_path: Path):
    run_feature = MagicMock(side_effect=PlanningFailure("make me a sandwich"))
    tools = _tools(tmp_path, run_feature=run_feature)

    result = tools.dispatch("implement_database_feature", {"query": "make me a sandwich"})

    assert result.startswith("Error executing implement_database_feature: No database schema requirements")
    run_feature.assert_called_once_with("make me a sandwich")


def test_unknown_tool_and_bad_arguments(tmp_path: Path):
    tools = _tools(tmp_path)

    assert tools.dispatch("delete_everything", {}) == "Error executing delete_everything: unknown tool"
    assert tools.dispatch("read_file", {"path": "x"}).startswith("Error executing read_file: ")
