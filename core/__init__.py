"""Core contracts shared by the fetch pipeline."""

from .contracts import (
    ReportSpec,
    RoundResult,
    TaskOutcome,
    TaskState,
)

__all__ = [
    "ReportSpec",
    "RoundResult",
    "TaskOutcome",
    "TaskState",
]
