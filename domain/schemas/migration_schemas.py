from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

DEFAULT_BATCH_SIZE = 100


class MigrationOptions(BaseModel):
    """Caller-supplied knobs for a bulk preference migration"""

    dry_run: bool = False
    batch_size: int = Field(DEFAULT_BATCH_SIZE, ge=1)
    target_users: Optional[List[str]] = None


class MigrationResult(BaseModel):
    success: bool
    affected_users: int = 0
    errors: List[str] = Field(default_factory=list)
    details: Optional[List[Dict[str, Any]]] = None


class MigrationReport(BaseModel):
    """Preference adoption and distribution snapshot"""

    total_users: int
    users_with_preferences: int
    users_without_preferences: int
    perspective_distribution: Dict[str, int] = Field(default_factory=dict)
    tone_distribution: Dict[str, int] = Field(default_factory=dict)
    language_distribution: Dict[str, int] = Field(default_factory=dict)
    ai_model_distribution: Dict[str, int] = Field(default_factory=dict)
    fact_checking_enabled: int = 0
    propaganda_detection_enabled: int = 0
