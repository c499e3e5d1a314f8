"""Generate-validate-repair loop for collection route code."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from app.core.errors import GenerationFailure, TextGenerationError
from app.core.progress import ProgressReporter, StepKind
from app.core.workflow import FeatureStage
from app.generators.endpoint_gen.postprocess import postprocess_route
from app.generators.endpoint_gen.prompt import build_endpoint_prompt, build_repair_prompt
from app.llm.client import TextGenerator
from app.planning.types import GenerationAttempt, TableDefinition, ValidationResult
from app.validation.code_validator import validate_route_code
from app.validation.ts_source import clean_generated_text

log = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


class RepairState(str, Enum):
    DRAFTING = "DRAFTING"
    VALIDATING = "VALIDATING"
    ACCEPTED = "ACCEPTED"
    REPAIRING = "REPAIRING"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class GenerationOutcome:
    text: str
    attempts: List[GenerationAttempt]

    @property
    def attempts_used(self) -> int:
        return len(self.attempts)


class RetryRepairEngine:
    """
    Drives one table's route through DRAFTING -> VALIDATING -> ACCEPTED,
    going through REPAIRING (with the unmet rules appended to the prompt) on
    each invalid draft until ``max_attempts`` is spent, then REJECTED.
    """

    def __init__(
        self,
        generator: TextGenerator,
        reporter: ProgressReporter,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self.generator = generator
        self.reporter = reporter
        self.max_attempts = max_attempts

    def _transition(self, table: TableDefinition, state: RepairState, attempt: int, message: str) -> None:
        kind = {
            RepairState.DRAFTING: StepKind.GENERATING,
            RepairState.VALIDATING: StepKind.VALIDATING,
            RepairState.ACCEPTED: StepKind.VALIDATING,
            RepairState.REPAIRING: StepKind.WARNING,
            RepairState.REJECTED: StepKind.WARNING,
        }[state]
        self.reporter.step(
            kind,
            message,
            stage=FeatureStage.GENERATE_ENDPOINTS.value,
            table=table.table_name,
            state=state.value,
            attempt=attempt,
        )

    def _draft(self, prompt: str) -> tuple[str, Optional[ValidationResult]]:
        """Returns (cleaned text, None) or ("", failure) when the service errored."""
        try:
            raw = self.generator.generate(prompt)
        except TextGenerationError as e:
            log.warning("Text generation failed: %s", e)
            return "", ValidationResult.of([f"Text generation failed: {e}"])
        return clean_generated_text(raw), None

    def generate(self, table: TableDefinition) -> GenerationOutcome:
        base_prompt = build_endpoint_prompt(table)
        prompt = base_prompt
        attempts: List[GenerationAttempt] = []

        for number in range(1, self.max_attempts + 1):
            self._transition(table, RepairState.DRAFTING, number,
                             f"Generating API route for {table.table_name} (attempt {number}/{self.max_attempts})")
            text, failure = self._draft(prompt)

            self._transition(table, RepairState.VALIDATING, number, f"Validating attempt {number}")
            result = failure if failure is not None else validate_route_code(text, table)
            attempts.append(GenerationAttempt(attempt_number=number, raw_text=text, validation=result))

            if result.is_valid:
                self._transition(table, RepairState.ACCEPTED, number,
                                 f"Generated valid API route on attempt {number}")
                return GenerationOutcome(text=postprocess_route(text, table), attempts=attempts)

            if number < self.max_attempts:
                self._transition(table, RepairState.REPAIRING, number,
                                 f"Attempt {number} failed validation: {', '.join(result.errors)}")
                prompt = build_repair_prompt(base_prompt, result.errors)

        self._transition(table, RepairState.REJECTED, self.max_attempts,
                         f"Giving up on {table.table_name} after {self.max_attempts} attempts")
        raise GenerationFailure(table.table_name, attempts)
