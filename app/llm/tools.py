"""Tools the conversational agent may call, all confined to one project root.

Every path argument is resolved against the project root and refused when it
lands outside it. Tool failures are returned to the model as text so the
conversation can continue.
"""
from __future__ import annotations
import json
import logging
import shlex
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from app.core import commands
from app.core.errors import ExternalToolFailure, FeatureAgentError
from app.generators.writer import ProjectLayout, write_artifact
from app.planning.analyzer import ProjectAnalyzer

log = logging.getLogger(__name__)

# characters of a file returned to the model in one read
READ_LIMIT = 20000

CommandRunner = Callable[..., str]
FeatureRunner = Callable[[str], str]


def _string(description: str) -> Dict[str, str]:
    return {"type": "STRING", "description": description}


TOOL_DECLARATIONS: List[Dict[str, Any]] = [
    {
        "name": "list_files",
        "description": "List files and directories at a path inside the project",
        "parameters": {
            "type": "OBJECT",
            "properties": {"path": _string("Directory relative to the project root")},
            "required": ["path"],
        },
    },
    {
        "name": "read_file",
        "description": "Read the contents of a file inside the project",
        "parameters": {
            "type": "OBJECT",
            "properties": {"filepath": _string("File relative to the project root")},
            "required": ["filepath"],
        },
    },
    {
        "name": "write_file",
        "description": "Write content to a file inside the project, creating directories as needed",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "filepath": _string("File relative to the project root"),
                "content": _string("Full new content of the file"),
            },
            "required": ["filepath", "content"],
        },
    },
    {
        "name": "execute_command",
        "description": "Run a command (no shell) in a directory inside the project",
        "parameters": {
            "type": "OBJECT",
            "properties": {
                "command": _string("Command line, e.g. 'npx drizzle-kit generate'"),
                "directory": _string("Working directory relative to the project root"),
            },
            "required": ["command"],
        },
    },
    {
        "name": "analyze_project",
        "description": "Summarize the project's configuration, schema modules and components",
        "parameters": {"type": "OBJECT", "properties": {}},
    },
    {
        "name": "implement_database_feature",
        "description": (
            "Plan tables for a feature request and generate the schema, migration, "
            "API routes, seed data, hooks and UI wiring"
        ),
        "parameters": {
            "type": "OBJECT",
            "properties": {"query": _string("The feature request in plain language")},
            "required": ["query"],
        },
    },
]


class ToolError(FeatureAgentError):
    """A tool call was refused or its arguments were unusable."""


class ProjectTools:
    def __init__(
        self,
        project_dir: Path,
        run_feature: FeatureRunner,
        run_command: Optional[CommandRunner] = None,
    ):
        self.root = Path(project_dir).resolve()
        self.layout = ProjectLayout(self.root)
        self.run_feature = run_feature
        self._run_command = run_command
        self._handlers: Dict[str, Callable[..., str]] = {
            "list_files": self.list_files,
            "read_file": self.read_file,
            "write_file": self.write_file,
            "execute_command": self.execute_command,
            "analyze_project": self.analyze_project,
            "implement_database_feature": self.implement_database_feature,
        }

    def run_command(self, args: List[str], cwd: Path) -> str:
        runner = self._run_command or commands.run_command
        return runner(args, cwd)

    def resolve(self, rel: str) -> Path:
        """Resolve ``rel`` against the project root; refuse anything outside it."""
        target = (self.root / (rel or ".")).resolve()
        if target != self.root and self.root not in target.parents:
            raise ToolError(f"Path '{rel}' is outside the project directory")
        return target

    def dispatch(self, name: str, args: Optional[Dict[str, Any]] = None) -> str:
        handler = self._handlers.get(name)
        if handler is None:
            return f"Error executing {name}: unknown tool"
        log.info("Tool call %s %s", name, args or {})
        try:
            return handler(**(args or {}))
        except (FeatureAgentError, OSError, ValueError, TypeError) as e:
            log.warning("Tool %s failed: %s", name, e)
            return f"Error executing {name}: {e}"

    def list_files(self, path: str = ".") -> str:
        target = self.resolve(path)
        if not target.is_dir():
            raise ToolError(f"'{path}' is not a directory")
        entries = [
            child.name + ("/" if child.is_dir() else "")
            for child in sorted(target.iterdir(), key=lambda p: p.name)
        ]
        return f"Files and directories in '{path}':\n" + "\n".join(entries)

    def read_file(self, filepath: str) -> str:
        content = self.resolve(filepath).read_text(encoding="utf-8")
        if len(content) > READ_LIMIT:
            return content[:READ_LIMIT] + f"\n... (truncated, {len(content)} characters total)"
        return content

    def write_file(self, filepath: str, content: str) -> str:
        path = write_artifact(self.resolve(filepath), content)
        return f"Successfully wrote {len(content)} characters to {self.layout.relative(path)}"

    def execute_command(self, command: str, directory: str = ".") -> str:
        args = shlex.split(command)
        if not args:
            raise ToolError("empty command")
        cwd = self.resolve(directory)
        try:
            output = self.run_command(args, cwd)
        except ExternalToolFailure as e:
            return f"Command failed: {e}\n{e.output}".rstrip()
        return output or "(no output)"

    def analyze_project(self) -> str:
        analysis = {
            "has_package_json": (self.root / "package.json").is_file(),
            "has_drizzle_config": (self.root / "drizzle.config.ts").is_file(),
            "context": ProjectAnalyzer(self.layout).get_project_context(),
        }
        return json.dumps(analysis, indent=2)

    def implement_database_feature(self, query: str) -> str:
        return self.run_feature(query)
