from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from app.core.workflow import FeatureStage

class FeatureJobCreateRequest(BaseModel):
    query: str = Field(..., min_length=1, examples=["Can you store the recently played songs in a table"])
    project_dir: str = Field(..., examples=["/data/projects/spotify-clone"])

class FeatureJobResponse(BaseModel):
    id: str
    query: str
    project_dir: str
    stage: FeatureStage
    status: str
    error_message: Optional[str] = None
    artifacts: Dict[str, Any] = {}
