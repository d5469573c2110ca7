"""Fetch-then-save pipeline for one report within one round."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Optional, Protocol

from core import ReportSpec, TaskOutcome, TaskState
from utils.exceptions import ArtifactWriteError, FetchError


logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, report_id: int) -> Awaitable[bytes]: ...


class Writer(Protocol):
    def write(self, name: str, payload: bytes) -> Awaitable[object]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportTask:
    """
    Pending -> Fetching -> (FetchFailed | Fetched -> Writing -> (WriteFailed | Saved)).

    Fetch and write errors end the task and are logged; they never leave
    ``run()``.
    """

    def __init__(
        self,
        report: ReportSpec,
        *,
        fetcher: Fetcher,
        writer: Writer,
        timeout: Optional[float] = None,
    ) -> None:
        self.report = report
        self._fetcher = fetcher
        self._writer = writer
        self._timeout = timeout
        self.state = TaskState.PENDING
        self._started_at = _utcnow()

    async def run(self) -> TaskOutcome:
        self._started_at = _utcnow()

        self.state = TaskState.FETCHING
        try:
            payload = await self._fetch()
        except FetchError as exc:
            return self._fail(TaskState.FETCH_FAILED, f"fetch failed: {exc}")
        except asyncio.TimeoutError:
            return self._fail(TaskState.FETCH_FAILED, f"fetch timed out after {self._timeout}s")
        self.state = TaskState.FETCHED

        self.state = TaskState.WRITING
        try:
            path = await self._writer.write(self.report.name, payload)
        except ArtifactWriteError as exc:
            return self._fail(TaskState.WRITE_FAILED, f"write failed: {exc}")

        self.state = TaskState.SAVED
        logger.info(f"[{self.report.label}] saved {len(payload)} bytes to {path}")
        return TaskOutcome(
            report=self.report,
            state=self.state,
            artifact_path=str(path),
            bytes_written=len(payload),
            started_at=self._started_at,
            finished_at=_utcnow(),
        )

    async def _fetch(self) -> bytes:
        if self._timeout is None:
            return await self._fetcher.fetch(self.report.id)
        return await asyncio.wait_for(self._fetcher.fetch(self.report.id), timeout=self._timeout)

    def _fail(self, state: TaskState, message: str) -> TaskOutcome:
        self.state = state
        logger.error(f"[{self.report.label}] {message}")
        return TaskOutcome(
            report=self.report,
            state=state,
            error=message,
            started_at=self._started_at,
            finished_at=_utcnow(),
        )
