"""Tests for the background job runner."""
from pathlib import Path
from unittest.mock import MagicMock

import yaml

from app.core import commands
from app.core.config import settings
from app.core.workflow import FeatureStage
from app.db.models import FeatureJob
from app.tasks import jobs


def _job(project_dir: Path, query: str) -> FeatureJob:
    return FeatureJob(
        id="job-1",
        query=query,
        project_dir=str(project_dir),
        stage=FeatureStage.ANALYZE_PROJECT,
        status="RUNNING",
        artifacts={},
    )


def test_write_summary_report(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(settings, "workspaces_dir", str(tmp_path))

    path = jobs.write_summary_report("job-1", {"query": "q", "failures": {}})

    assert path == tmp_path / "job-1" / "summary.yaml"
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"query": "q", "failures": {}}


def test_execute_job_success(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(settings, "workspaces_dir", str(tmp_path / "workspaces"))
    monkeypatch.setattr(jobs, "get_text_generator", lambda: None)
    monkeypatch.setattr(commands, "run_command", MagicMock(return_value=""))
    project = tmp_path / "project"
    project.mkdir()
    job = _job(project, "store the recently played songs")
    db = MagicMock()

    jobs.execute_job(db, job)

    assert job.status == "DONE"
    assert job.stage == FeatureStage.DONE
    assert job.artifacts["tables"][0]["tableName"] == "recently_played"
    report = Path(job.artifacts["summary_path"])
    assert report.is_file()
    assert yaml.safe_load(report.read_text(encoding="utf-8"))["query"] == "store the recently played songs"
    # one commit per stage entered plus the final one
    assert db.commit.call_count > 1


def test_execute_job_planning_failure(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(jobs, "get_text_generator", lambda: None)
    job = _job(tmp_path, "make me a sandwich")
    db = MagicMock()

    jobs.execute_job(db, job)

    assert job.status == "FAILED"
    assert job.stage == FeatureStage.FAILED
    assert job.error_message.startswith("No database schema requirements detected")
    assert job.artifacts == {"stages": ["empty project", "no tables planned"]}
    db.commit.assert_called()
