import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from sqlalchemy import text
from alembic.config import Config
from alembic import command
from app.core.config import settings
from app.core.logging import configure_logging
from app.api.routes_health import router as health_router
from app.api.routes_jobs import router as jobs_router
from app.db.session import engine

configure_logging()
log = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"
_NO_RUN = {"run_id": "-", "stage": "-"}


def wait_for_database(max_retries: int = 30, retry_delay: float = 1.0) -> None:
    """Block until the job database accepts connections."""
    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            log.info("Database connection successful", extra=_NO_RUN)
            return
        except Exception as e:
            if attempt == max_retries:
                log.error("Database connection failed after %d attempts", max_retries, extra=_NO_RUN)
                raise
            log.warning("Database not ready, retrying in %s seconds (attempt %d/%d): %s",
                        retry_delay, attempt, max_retries, e, extra=_NO_RUN)
            time.sleep(retry_delay)


def run_migrations() -> None:
    """Upgrade the feature_jobs schema to head."""
    log.info("Running database migrations...", extra=_NO_RUN)
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    command.upgrade(alembic_cfg, "head")
    log.info("Database migrations completed", extra=_NO_RUN)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Starting %s (%s)", settings.app_name, settings.app_env, extra=_NO_RUN)
    try:
        wait_for_database()
        run_migrations()
    except Exception as e:
        log.error("API startup failed: %s", e, exc_info=True, extra=_NO_RUN)
        raise
    yield
    log.info("Shutting down API server...", extra=_NO_RUN)


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan
)
API_PREFIX = "/v1"
app.include_router(health_router, prefix=API_PREFIX, tags=["health"])
app.include_router(jobs_router, prefix=API_PREFIX, tags=["jobs"])
