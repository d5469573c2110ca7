"""Round orchestration and scheduling."""

from .round import RoundOrchestrator
from .scheduler import Scheduler
from .task import ReportTask
from .ticker import Ticker

__all__ = [
    "ReportTask",
    "RoundOrchestrator",
    "Scheduler",
    "Ticker",
]
