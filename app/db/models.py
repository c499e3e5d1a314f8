from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Enum, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.core.workflow import FeatureStage

class FeatureJob(Base):
    __tablename__ = "feature_jobs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    query: Mapped[str] = mapped_column(Text, nullable=False)
    project_dir: Mapped[str] = mapped_column(Text, nullable=False)

    stage: Mapped[FeatureStage] = mapped_column(Enum(FeatureStage), default=FeatureStage.ANALYZE_PROJECT, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="QUEUED", nullable=False)

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    artifacts: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
