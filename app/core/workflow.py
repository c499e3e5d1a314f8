from dataclasses import dataclass, field
from enum import Enum

class FeatureStage(str, Enum):
    ANALYZE_PROJECT = "ANALYZE_PROJECT"
    PLAN = "PLAN"
    VALIDATE_PLAN = "VALIDATE_PLAN"
    WRITE_SCHEMA = "WRITE_SCHEMA"
    VALIDATE_ARTIFACTS = "VALIDATE_ARTIFACTS"
    MIGRATE = "MIGRATE"
    GENERATE_ENDPOINTS = "GENERATE_ENDPOINTS"
    SEED = "SEED"
    WRITE_HOOKS = "WRITE_HOOKS"
    PLAN_UI = "PLAN_UI"
    INTEGRATE_UI = "INTEGRATE_UI"
    DONE = "DONE"
    FAILED = "FAILED"

@dataclass(frozen=True)
class StageResult:
    stage: FeatureStage
    ok: bool
    message: str
    artifacts: list[str] = field(default_factory=list)
