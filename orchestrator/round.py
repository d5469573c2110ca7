"""One round: every configured report fetched and saved concurrently."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from core import ReportSpec, RoundResult, TaskOutcome, TaskState
from veracross import ReportFetcher, VeracrossSession
from .task import Fetcher, ReportTask, Writer


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoundOrchestrator:
    """Fans out one task per report and joins them all before returning."""

    def __init__(
        self,
        reports: Iterable[ReportSpec],
        session: Optional[VeracrossSession],
        writer: Writer,
        *,
        fetcher: Optional[Fetcher] = None,
        task_timeout: Optional[float] = None,
        max_concurrency: Optional[int] = None,
    ) -> None:
        self._reports: Sequence[ReportSpec] = tuple(reports)
        if fetcher is None:
            if session is None:
                raise ValueError("either session or fetcher is required")
            fetcher = ReportFetcher(session)
        self._fetcher = fetcher
        self._writer = writer
        self._task_timeout = task_timeout
        self._max_concurrency = max_concurrency

    @property
    def reports(self) -> Sequence[ReportSpec]:
        return self._reports

    def _build_tasks(self) -> List[ReportTask]:
        return [
            ReportTask(
                report,
                fetcher=self._fetcher,
                writer=self._writer,
                timeout=self._task_timeout,
            )
            for report in self._reports
        ]

    async def run_round(self, round_index: int = 1) -> RoundResult:
        """Run every report once; returns only after every task has finished."""
        started_at = _utcnow()
        tasks = self._build_tasks()
        logger.info(f"Round {round_index}: fetching {len(tasks)} reports")

        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

        async def _run(task: ReportTask) -> TaskOutcome:
            if semaphore is None:
                return await task.run()
            async with semaphore:
                return await task.run()

        results = await asyncio.gather(*(_run(task) for task in tasks), return_exceptions=True)

        outcomes: List[TaskOutcome] = []
        for task, res in zip(tasks, results):
            if isinstance(res, BaseException):
                if isinstance(res, asyncio.CancelledError):
                    raise res
                logger.error(f"[{task.report.label}] task crashed: {res!r}")
                before_write = task.state in {TaskState.PENDING, TaskState.FETCHING}
                task.state = TaskState.FETCH_FAILED if before_write else TaskState.WRITE_FAILED
                outcomes.append(
                    TaskOutcome(
                        report=task.report,
                        state=task.state,
                        error=f"unexpected error: {res!r}",
                    )
                )
                continue
            outcomes.append(res)

        result = RoundResult(
            round_index=round_index,
            started_at=started_at,
            completed_at=_utcnow(),
            outcomes=outcomes,
        )
        logger.info(
            f"Round {round_index} complete: {result.succeeded}/{result.total} saved "
            f"in {result.duration_sec:.1f}s"
        )
        return result
