from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable

from .models import GenerationMode, JobStatus

JobListener = Callable[["Job"], None]


class JobNotFoundError(KeyError):
    pass


class InvalidTransitionError(ValueError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Job:
    id: str
    prompt: str
    mode: GenerationMode
    created_at: datetime
    status: JobStatus = JobStatus.processing
    provider_job_id: str | None = None
    result_url: str | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not JobStatus.processing


class JobStore:
    """
    Session-local collection of jobs keyed by id.

    Records are immutable; every update swaps exactly one record for a new
    one, so a reader sees either the old or the new version of a job.
    Status only ever moves from processing to completed or failed.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        on_change: JobListener | None = None,
    ) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = asyncio.Lock()
        self._clock = clock
        self._on_change = on_change

    def _new_id(self) -> str:
        candidate = int(self._clock() * 1000)
        while str(candidate) in self._jobs:
            candidate += 1
        return str(candidate)

    async def create(
        self,
        *,
        prompt: str,
        mode: GenerationMode = GenerationMode.text_to_video,
    ) -> Job:
        async with self._lock:
            job = Job(id=self._new_id(), prompt=prompt, mode=mode, created_at=_utcnow())
            self._jobs[job.id] = job
        self._notify(job)
        return job

    async def get(self, job_id: str) -> Job | None:
        async with self._lock:
            return self._jobs.get(job_id)

    async def snapshot(self) -> list[Job]:
        """Jobs newest first, the order the job list shows them in."""
        async with self._lock:
            return sorted(self._jobs.values(), key=lambda j: int(j.id), reverse=True)

    async def attach_provider_job(self, job_id: str, provider_job_id: str) -> Job:
        async with self._lock:
            job = self._require(job_id)
            if job.provider_job_id is not None:
                raise InvalidTransitionError(f"Job {job_id} already tracks {job.provider_job_id}")
            job = self._swap(job, provider_job_id=provider_job_id)
        self._notify(job)
        return job

    async def complete(self, job_id: str, result_url: str) -> Job:
        if not result_url:
            raise ValueError("A completed job needs a result URL")
        return await self._finish(job_id, status=JobStatus.completed, result_url=result_url)

    async def fail(self, job_id: str, error: str) -> Job:
        if not error:
            raise ValueError("A failed job needs an error message")
        return await self._finish(job_id, status=JobStatus.failed, error=error)

    async def _finish(self, job_id: str, **changes) -> Job:
        async with self._lock:
            job = self._require(job_id)
            if job.is_terminal:
                raise InvalidTransitionError(f"Job {job_id} is already {job.status.value}")
            job = self._swap(job, **changes)
        self._notify(job)
        return job

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _swap(self, job: Job, **changes) -> Job:
        updated = replace(job, **changes)
        self._jobs[job.id] = updated
        return updated

    def _notify(self, job: Job) -> None:
        if self._on_change is not None:
            self._on_change(job)
