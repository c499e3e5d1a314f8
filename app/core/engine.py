from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from app.core import commands
from app.core.errors import ExternalToolFailure, GenerationFailure, PlanningFailure, ValidationFailure
from app.core.progress import LoggingReporter, ProgressReporter, RecordingReporter, StepKind
from app.core.workflow import FeatureStage, StageResult
from app.generators.endpoint_gen.render import endpoint_usage, render_collection_route, render_id_route
from app.generators.hook_gen.render import hook_file_stem, render_hook, render_hooks_index
from app.generators.repair import RetryRepairEngine
from app.generators.schema_gen.render import render_schema_file, render_schema_index
from app.generators.seed_gen.render import render_seed_script
from app.generators.writer import ProjectLayout, regenerate_index, write_artifact
from app.llm.client import TextGenerator
from app.planning.analyzer import ProjectAnalyzer
from app.planning.normalizer import PlanNormalizer
from app.planning.types import TableDefinition, WorkflowSummary
from app.ui.planner import plan_ui_integration
from app.ui.rewriter import integrate_ui
from app.validation.code_validator import validate_route_code
from app.validation.schema_validator import validate_artifacts, validate_plans

log = logging.getLogger(__name__)

CommandRunner = Callable[..., str]
StageListener = Callable[[FeatureStage], None]


class FeatureWorkflow:
    """
    Runs one query through every stage against a front-end project.

    Planning and validation failures propagate. Migration and seeding
    failures become warnings. A table whose endpoint cannot be generated is
    recorded as failed and left out of its remaining stages.
    """

    def __init__(
        self,
        project_dir: Path,
        generator: Optional[TextGenerator] = None,
        reporter: Optional[ProgressReporter] = None,
        run_command: Optional[CommandRunner] = None,
        on_stage: Optional[StageListener] = None,
        run_id: str = "-",
    ):
        self.layout = ProjectLayout(Path(project_dir))
        self.generator = generator
        self.run_id = run_id
        self.reporter = RecordingReporter(forward_to=reporter or LoggingReporter(run_id))
        self.run_command = run_command or commands.run_command
        self.on_stage = on_stage
        self.results: List[StageResult] = []

    def _enter(self, stage: FeatureStage) -> None:
        log.debug("Entering stage", extra={"run_id": self.run_id, "stage": stage.value})
        if self.on_stage is not None:
            self.on_stage(stage)

    def _record(self, stage: FeatureStage, ok: bool, message: str, artifacts: Sequence[str] = ()) -> None:
        self.results.append(StageResult(stage=stage, ok=ok, message=message, artifacts=list(artifacts)))

    def _warn(self, summary: WorkflowSummary, stage: FeatureStage, message: str) -> None:
        summary.warnings.append(message)
        self.reporter.step(StepKind.WARNING, message, stage=stage.value)

    def run(self, query: str) -> WorkflowSummary:
        summary = WorkflowSummary(query=query)
        self.reporter.step(StepKind.THINKING, f"Processing request: {query}")

        context = self.analyze_project()
        tables = self.plan(query, context)
        summary.tables = list(tables)

        self.validate_plan(tables, summary)
        self.write_schema(tables, summary)
        self.validate_schema_files(tables)
        self.migrate(summary)

        generated = self.generate_endpoints(tables, summary)
        self.seed(generated, summary)
        self.write_hooks(generated, summary)

        self._enter(FeatureStage.PLAN_UI)
        plan = plan_ui_integration(query, generated)
        summary.ui_plan = plan
        self.reporter.step(
            StepKind.INTEGRATING,
            f"Planned {len(plan.sections)} UI section(s)",
            stage=FeatureStage.PLAN_UI.value,
            skipped=plan.skipped,
        )
        self._record(FeatureStage.PLAN_UI, True, "ui planned")

        self.integrate_ui(plan, summary)

        self._enter(FeatureStage.DONE)
        summary.events = [e.to_dict() for e in self.reporter.events]
        log.info(
            "Feature workflow finished: %d table(s), %d failure(s), %d warning(s)",
            len(summary.tables), len(summary.failures), len(summary.warnings),
            extra={"run_id": self.run_id, "stage": FeatureStage.DONE.value},
        )
        return summary

    def analyze_project(self) -> str:
        self._enter(FeatureStage.ANALYZE_PROJECT)
        self.reporter.step(StepKind.ANALYZING, "Analyzing project structure",
                           stage=FeatureStage.ANALYZE_PROJECT.value)
        context = ProjectAnalyzer(self.layout).get_project_context()
        self._record(FeatureStage.ANALYZE_PROJECT, True, context or "empty project")
        return context

    def plan(self, query: str, context: str) -> List[TableDefinition]:
        self._enter(FeatureStage.PLAN)
        self.reporter.step(StepKind.THINKING, "Planning table definitions", stage=FeatureStage.PLAN.value)
        tables = PlanNormalizer(self.generator).plan(query, context)
        if not tables:
            self._record(FeatureStage.PLAN, False, "no tables planned")
            raise PlanningFailure(query)
        names = ", ".join(t.table_name for t in tables)
        self.reporter.step(StepKind.THINKING, f"Planned {len(tables)} table(s): {names}",
                           stage=FeatureStage.PLAN.value)
        self._record(FeatureStage.PLAN, True, names)
        return tables

    def validate_plan(self, tables: Sequence[TableDefinition], summary: WorkflowSummary) -> None:
        self._enter(FeatureStage.VALIDATE_PLAN)
        self.reporter.step(StepKind.VALIDATING, "Validating table definitions",
                           stage=FeatureStage.VALIDATE_PLAN.value)
        result = validate_plans(tables)
        for warning in result.warnings:
            self._warn(summary, FeatureStage.VALIDATE_PLAN, warning)
        if not result.is_valid:
            self._record(FeatureStage.VALIDATE_PLAN, False, "; ".join(result.errors))
            raise ValidationFailure(FeatureStage.VALIDATE_PLAN.value, result.errors)
        self._record(FeatureStage.VALIDATE_PLAN, True, "plan valid")

    def write_schema(self, tables: Sequence[TableDefinition], summary: WorkflowSummary) -> None:
        self._enter(FeatureStage.WRITE_SCHEMA)
        written = []
        for table in tables:
            path = write_artifact(self.layout.schema_file(table), render_schema_file(table))
            rel = self.layout.relative(path)
            summary.record_file(table.table_name, rel)
            written.append(rel)
            self.reporter.step(StepKind.CREATING, f"Created {rel}", stage=FeatureStage.WRITE_SCHEMA.value)
        index = regenerate_index(
            self.layout.schema_dir, [t.file_stem for t in tables], render_schema_index
        )
        written.append(self.layout.relative(index))
        self.reporter.step(StepKind.EDITING, "Updated schema index", stage=FeatureStage.WRITE_SCHEMA.value)
        self._record(FeatureStage.WRITE_SCHEMA, True, "schema written", written)

    def validate_schema_files(self, tables: Sequence[TableDefinition]) -> None:
        self._enter(FeatureStage.VALIDATE_ARTIFACTS)
        result = validate_artifacts(tables, self.layout.schema_dir)
        if not result.is_valid:
            self._record(FeatureStage.VALIDATE_ARTIFACTS, False, "; ".join(result.errors))
            raise ValidationFailure(FeatureStage.VALIDATE_ARTIFACTS.value, result.errors)
        self.reporter.step(StepKind.VALIDATING, "Schema files validated",
                           stage=FeatureStage.VALIDATE_ARTIFACTS.value)
        self._record(FeatureStage.VALIDATE_ARTIFACTS, True, "schema files valid")

    def migrate(self, summary: WorkflowSummary) -> None:
        """drizzle-kit generate + migrate, falling back to push."""
        self._enter(FeatureStage.MIGRATE)
        stage = FeatureStage.MIGRATE.value
        self.reporter.step(StepKind.MIGRATING, "Generating and applying migrations", stage=stage)
        try:
            self.run_command(commands.npx("drizzle-kit", "generate"), self.layout.root)
            self.run_command(commands.npx("drizzle-kit", "migrate"), self.layout.root)
            self._record(FeatureStage.MIGRATE, True, "migrated")
            return
        except ExternalToolFailure as e:
            log.warning("Migration failed, trying push: %s", e, extra={"run_id": self.run_id, "stage": stage})

        try:
            self.run_command(commands.npx("drizzle-kit", "push"), self.layout.root)
            self.reporter.step(StepKind.MIGRATING, "Schema pushed with drizzle-kit push", stage=stage)
            self._record(FeatureStage.MIGRATE, True, "pushed")
        except ExternalToolFailure as e:
            self._warn(summary, FeatureStage.MIGRATE, f"Migration failed: {e}")
            self._record(FeatureStage.MIGRATE, False, str(e))

    def _route_for(self, table: TableDefinition, summary: WorkflowSummary) -> str:
        if self.generator is not None:
            outcome = RetryRepairEngine(self.generator, self.reporter).generate(table)
            summary.attempts[table.table_name] = outcome.attempts_used
            return outcome.text

        text = render_collection_route(table)
        result = validate_route_code(text, table)
        if not result.is_valid:
            raise ValidationFailure(FeatureStage.GENERATE_ENDPOINTS.value, result.errors)
        summary.attempts[table.table_name] = 0
        return text

    def generate_endpoints(self, tables: Sequence[TableDefinition], summary: WorkflowSummary) -> List[TableDefinition]:
        """Returns the tables whose endpoints were written."""
        self._enter(FeatureStage.GENERATE_ENDPOINTS)
        stage = FeatureStage.GENERATE_ENDPOINTS.value
        generated: List[TableDefinition] = []
        for table in tables:
            try:
                code = self._route_for(table, summary)
            except GenerationFailure as e:
                summary.failures[table.table_name] = str(e)
                summary.attempts[table.table_name] = len(e.attempts)
                self._warn(summary, FeatureStage.GENERATE_ENDPOINTS, str(e))
                continue

            for path, content in (
                (self.layout.collection_route(table), code),
                (self.layout.id_route(table), render_id_route(table)),
            ):
                write_artifact(path, content)
                rel = self.layout.relative(path)
                summary.record_file(table.table_name, rel)
                self.reporter.step(StepKind.CREATING, f"Created {rel}", stage=stage)
            self.reporter.step(StepKind.GENERATING, f"API endpoint ready: {table.api_path}", stage=stage,
                               routes=endpoint_usage(table))
            generated.append(table)
        self._record(FeatureStage.GENERATE_ENDPOINTS, bool(generated) or not tables,
                     f"{len(generated)}/{len(tables)} endpoint(s) generated")
        return generated

    def seed(self, tables: Sequence[TableDefinition], summary: WorkflowSummary) -> None:
        self._enter(FeatureStage.SEED)
        stage = FeatureStage.SEED.value
        for table in tables:
            path = write_artifact(self.layout.seed_script(table), render_seed_script(table))
            rel = self.layout.relative(path)
            summary.record_file(table.table_name, rel)
            self.reporter.step(StepKind.SEEDING, f"Seeding {table.table_name}", stage=stage)
            try:
                self.run_command(commands.npx("tsx", rel), self.layout.root)
            except ExternalToolFailure as e:
                self._warn(summary, FeatureStage.SEED, f"Seeding failed for {table.table_name}: {e}")
        self._record(FeatureStage.SEED, True, f"{len(tables)} seed script(s)")

    def write_hooks(self, tables: Sequence[TableDefinition], summary: WorkflowSummary) -> None:
        self._enter(FeatureStage.WRITE_HOOKS)
        stage = FeatureStage.WRITE_HOOKS.value
        for table in tables:
            path = write_artifact(self.layout.hook_file(table), render_hook(table))
            rel = self.layout.relative(path)
            summary.record_file(table.table_name, rel)
            self.reporter.step(StepKind.CREATING, f"Created {rel} ({table.hook_name})", stage=stage)
        if tables:
            regenerate_index(self.layout.hooks_dir, [hook_file_stem(t) for t in tables], render_hooks_index)
            self.reporter.step(StepKind.EDITING, "Updated hooks index", stage=stage)
        self._record(FeatureStage.WRITE_HOOKS, True, f"{len(tables)} hook(s)")

    def integrate_ui(self, plan, summary: WorkflowSummary) -> None:
        self._enter(FeatureStage.INTEGRATE_UI)
        stage = FeatureStage.INTEGRATE_UI.value
        if not plan.sections:
            self._record(FeatureStage.INTEGRATE_UI, True, "nothing to integrate")
            return
        result = integrate_ui(plan, self.layout)
        for warning in result.warnings:
            self._warn(summary, FeatureStage.INTEGRATE_UI, warning)
        for rel in result.files:
            self.reporter.step(StepKind.INTEGRATING, f"Updated {rel}", stage=stage)
        self._record(FeatureStage.INTEGRATE_UI, True, "ui integrated", result.files)
