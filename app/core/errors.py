"""Failure taxonomy for the feature pipeline."""
from __future__ import annotations
from typing import List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from app.planning.types import GenerationAttempt


class FeatureAgentError(Exception):
    """Base class for every failure raised by the pipeline."""


class TextGenerationError(FeatureAgentError):
    """The text-generation service could not be reached or answered with an error."""


class PlanningFailure(FeatureAgentError):
    """The planner produced no usable table definitions."""

    def __init__(self, query: str, message: str | None = None):
        self.query = query
        super().__init__(message or (
            "No database schema requirements detected in the query. "
            "Try queries like 'store recently played songs' or 'create user profiles table'."
        ))


class ValidationFailure(FeatureAgentError):
    """A plan or a persisted artifact broke one or more schema rules."""

    def __init__(self, stage: str, errors: Sequence[str]):
        self.stage = stage
        self.errors: List[str] = list(errors)
        details = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{stage} validation failed with {len(self.errors)} error(s):\n{details}")


class GenerationFailure(FeatureAgentError):
    """Endpoint generation exhausted its attempts without structurally valid output."""

    def __init__(self, table_name: str, attempts: Sequence["GenerationAttempt"]):
        self.table_name = table_name
        self.attempts = list(attempts)
        last_errors = self.attempts[-1].validation.errors if self.attempts else []
        super().__init__(
            f"Failed to generate a valid API route for {table_name} after "
            f"{len(self.attempts)} attempts: {', '.join(last_errors)}"
        )


class ExternalToolFailure(FeatureAgentError):
    """An external command (migration, seed script) failed or could not be started."""

    def __init__(self, command: Sequence[str], returncode: int | None, output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        status = "could not be started" if returncode is None else f"exited with {returncode}"
        super().__init__(f"`{' '.join(self.command)}` {status}")
