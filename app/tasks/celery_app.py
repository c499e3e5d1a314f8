from celery import Celery
from app.core.config import settings

celery_app = Celery(
    "feature_agent",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks.jobs"],
)
# one run at a time per worker process; runs write into the same project tree
celery_app.conf.update(
    task_track_started=True,
    task_default_queue="feature_jobs",
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,
    broker_connection_retry_on_startup=True,
)
