from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.db.models import FeatureJob
from app.schemas.jobs import FeatureJobCreateRequest, FeatureJobResponse
from app.tasks.jobs import run_feature_job

router = APIRouter(prefix="/jobs")


def _to_response(job: FeatureJob) -> FeatureJobResponse:
    return FeatureJobResponse(
        id=job.id,
        query=job.query,
        project_dir=job.project_dir,
        stage=job.stage,
        status=job.status,
        error_message=job.error_message,
        artifacts=job.artifacts or {},
    )

@router.post("", response_model=FeatureJobResponse)
def create_job(req: FeatureJobCreateRequest, db: Session = Depends(get_db)):
    job = FeatureJob(query=req.query, project_dir=req.project_dir, artifacts={})
    db.add(job)
    db.commit()
    db.refresh(job)

    run_feature_job.delay(job.id)

    return _to_response(job)

@router.get("/{job_id}", response_model=FeatureJobResponse)
def get_job(job_id: str, db: Session = Depends(get_db)):
    job = db.get(FeatureJob, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return _to_response(job)
