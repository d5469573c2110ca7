"""Data contracts for report rounds and their per-task outcomes."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportSpec(BaseModel):
    """One configured report: remote query id and local artifact name."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Axiom query id")
    name: str = Field(..., description="Artifact name, without suffix")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("report name must not be empty")
        if "/" in text or "\\" in text or text in {".", ".."}:
            raise ValueError(f"report name must be a plain file name: {text!r}")
        return text

    @property
    def label(self) -> str:
        return f"report {self.id}:{self.name}"


class TaskState(str, Enum):
    """Lifecycle of one fetch-then-save task."""

    PENDING = "pending"
    FETCHING = "fetching"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch_failed"
    WRITING = "writing"
    WRITE_FAILED = "write_failed"
    SAVED = "saved"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({TaskState.FETCH_FAILED, TaskState.WRITE_FAILED, TaskState.SAVED})


class TaskOutcome(BaseModel):
    """Terminal result of one task in a round."""

    report: ReportSpec
    state: TaskState
    error: Optional[str] = None
    artifact_path: Optional[str] = None
    bytes_written: int = 0
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime = Field(default_factory=_utcnow)

    @property
    def ok(self) -> bool:
        return self.state == TaskState.SAVED


class RoundResult(BaseModel):
    """Outcomes of every task launched in one round, collected after the join."""

    round_index: int
    started_at: datetime
    completed_at: datetime
    outcomes: List[TaskOutcome] = Field(default_factory=list)

    @property
    def saved(self) -> List[TaskOutcome]:
        return [item for item in self.outcomes if item.ok]

    @property
    def failed(self) -> List[TaskOutcome]:
        return [item for item in self.outcomes if not item.ok]

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return len(self.saved)

    @property
    def duration_sec(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()
