"""Multi-turn conversation with tool calls over a project directory."""
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.errors import TextGenerationError
from app.core.progress import LoggingReporter, ProgressReporter, StepKind
from app.llm.client import GeminiClient, ModelTurn
from app.llm.tools import TOOL_DECLARATIONS, ProjectTools

log = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """You are a database feature agent working inside a Next.js project that uses \
Drizzle ORM with PostgreSQL.

Before changing anything, explore with list_files, read_file and analyze_project so you understand \
the existing schema, API routes and components. When the user asks to store or manage data, call \
implement_database_feature with their request; it plans the tables and generates the schema, \
migration, API routes, seed data, hooks and UI wiring. Use write_file and execute_command only for \
small follow-up changes. Reply with a short summary of what you found or changed."""


class ChatSession:
    """
    Keeps the conversation history and runs the tool-call loop for each message.

    A tool result is fed back as a ``function`` turn; the loop stops when the
    model answers without asking for a tool, or after ``max_tool_rounds``.
    """

    def __init__(
        self,
        client: GeminiClient,
        tools: ProjectTools,
        max_tool_rounds: Optional[int] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.client = client
        self.tools = tools
        self.max_tool_rounds = max_tool_rounds if max_tool_rounds is not None else settings.chat_max_tool_rounds
        self.reporter = reporter or LoggingReporter()
        self.history: List[Dict[str, Any]] = []

    def clear(self) -> None:
        self.history = []

    def _ask(self) -> ModelTurn:
        return self.client.generate_content(
            self.history,
            tools=TOOL_DECLARATIONS,
            system_instruction=SYSTEM_INSTRUCTION,
        )

    def send(self, message: str) -> str:
        """Add a user message, run tool calls until the model answers, return the answer."""
        start = len(self.history)
        self.history.append({"role": "user", "parts": [{"text": message}]})
        try:
            self.reporter.step(StepKind.THINKING, "Thinking")
            turn = self._ask()
            rounds = 0
            while turn.function_calls and rounds < self.max_tool_rounds:
                call = turn.function_calls[0]
                self.reporter.step(StepKind.EXECUTING, f"Using tool: {call.name}", tool=call.name)
                result = self.tools.dispatch(call.name, call.args)
                self.history.append({
                    "role": "model",
                    "parts": [{"functionCall": {"name": call.name, "args": call.args}}],
                })
                self.history.append({
                    "role": "function",
                    "parts": [{"functionResponse": {"name": call.name, "response": {"result": result}}}],
                })
                rounds += 1
                turn = self._ask()
        except TextGenerationError:
            del self.history[start:]
            raise

        text = turn.text.strip()
        if turn.function_calls:
            stopped = f"Stopped after {rounds} tool call(s) without a final answer"
            self.reporter.step(StepKind.WARNING, stopped)
            text = text or stopped + "."
        self.history.append({"role": "model", "parts": [{"text": text}]})
        return text
