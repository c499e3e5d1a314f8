from __future__ import annotations
import logging
from pathlib import Path
import yaml
from sqlalchemy.orm import Session
from app.tasks.celery_app import celery_app
from app.db.session import SessionLocal
from app.db.models import FeatureJob
from app.core.config import settings
from app.core.engine import FeatureWorkflow
from app.core.errors import FeatureAgentError
from app.core.workflow import FeatureStage
from app.llm.client import get_text_generator

log = logging.getLogger(__name__)


def write_summary_report(job_id: str, summary: dict) -> Path:
    """Write summary.yaml under the job's workspace directory."""
    out_dir = Path(settings.workspaces_dir) / job_id
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / "summary.yaml"
    path.write_text(yaml.safe_dump(summary, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return path


def execute_job(db: Session, job: FeatureJob) -> None:
    """Run the workflow for one job, keeping its stage/status/artifacts in step."""
    def on_stage(stage: FeatureStage) -> None:
        job.stage = stage
        db.commit()

    workflow = FeatureWorkflow(
        project_dir=Path(job.project_dir),
        generator=get_text_generator(),
        on_stage=on_stage,
        run_id=job.id,
    )
    try:
        summary = workflow.run(job.query)
    except FeatureAgentError as e:
        log.error("Workflow failed: %s", e, extra={"run_id": job.id, "stage": str(job.stage.value)})
        job.status = "FAILED"
        job.stage = FeatureStage.FAILED
        job.error_message = str(e)
        job.artifacts = {"stages": [r.message for r in workflow.results]}
        db.commit()
        return

    data = summary.to_dict()
    report = write_summary_report(job.id, data)
    job.artifacts = {**data, "summary_path": str(report)}
    job.status = "DONE_WITH_FAILURES" if summary.failures else "DONE"
    job.stage = FeatureStage.DONE
    db.commit()
    log.info("Workflow completed", extra={"run_id": job.id, "stage": FeatureStage.DONE.value})


@celery_app.task(name="run_feature_job")
def run_feature_job(job_id: str) -> None:
    db: Session = SessionLocal()
    try:
        job = db.get(FeatureJob, job_id)
        if not job:
            log.error("Job not found", extra={"run_id": job_id, "stage": "-"})
            return

        job.status = "RUNNING"
        db.commit()
        log.info("Starting workflow", extra={"run_id": job_id, "stage": str(job.stage.value)})

        execute_job(db, job)

    except Exception as e:
        job = db.get(FeatureJob, job_id)
        stage = str(job.stage.value) if job else "-"
        log.exception("Workflow crashed", extra={"run_id": job_id, "stage": stage})
        if job:
            job.status = "FAILED"
            job.stage = FeatureStage.FAILED
            job.error_message = str(e)
            db.commit()
    finally:
        db.close()
