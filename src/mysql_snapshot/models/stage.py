"""Tagged results returned by collection stages."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class StageStatus(str, Enum):
    """Outcome of one collection stage."""

    OK = "ok"
    DEGRADED = "degraded"
    FATAL = "fatal"


class StageResult(BaseModel):
    """Outcome of one collection stage, with its snapshot fragment."""

    stage: str = Field(..., description="Stage name (tables, users, ...)")
    status: StageStatus = Field(..., description="Outcome tag")
    fragment: Any = Field(None, description="Collected fragment, None on fatal")
    reason: Optional[str] = Field(
        None, description="Why the stage degraded or failed"
    )
    error: Optional[BaseException] = Field(
        None, description="Underlying exception for fatal results"
    )

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @classmethod
    def ok(cls, stage: str, fragment: Any) -> "StageResult":
        return cls(stage=stage, status=StageStatus.OK, fragment=fragment)

    @classmethod
    def degraded(cls, stage: str, fragment: Any, reason: str) -> "StageResult":
        return cls(
            stage=stage, status=StageStatus.DEGRADED, fragment=fragment, reason=reason
        )

    @classmethod
    def fatal(cls, stage: str, error: BaseException) -> "StageResult":
        return cls(
            stage=stage, status=StageStatus.FATAL, reason=str(error), error=error
        )

    @property
    def is_fatal(self) -> bool:
        return self.status is StageStatus.FATAL
