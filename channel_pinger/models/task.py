"""Pydantic models for step results and scheduled run outcomes."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StepResult(str, Enum):
    """Result of one login or message step."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"  # the element the step waits for never appeared
    ERROR = "error"


class TaskStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"  # a previous run was still in progress


class TaskOutcome(BaseModel):
    """Outcome of one scheduled run. Only logged and reported, never stored."""

    status: TaskStatus = TaskStatus.FAILED
    stage: str = "session"  # session, login, message, done
    login: Optional[StepResult] = None  # None when the session was already logged in
    message: Optional[StepResult] = None
    error: Optional[str] = None
    started_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    finished_at: Optional[str] = None
    duration_seconds: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.SUCCESS
