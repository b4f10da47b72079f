from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .client import StudioClient, VideoServiceError
from .config import settings
from .jobs import Job, JobNotFoundError, JobStore
from .models import GenerationMode, ProviderStatus

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to generate video"
CHECK_FAILED_MESSAGE = "Failed to check video status"
GENERATION_FAILED_MESSAGE = "Video generation failed"
TIMEOUT_MESSAGE = "Timeout: Video generation took too long"
CANCELLED_MESSAGE = "Cancelled"

Sleep = Callable[[float], Awaitable[None]]


class JobPoller:
    """
    Submits generation requests and drives each job to a terminal state.

    Every job gets at most one polling task. A task checks the status
    endpoint, then waits ``interval`` seconds before the next check, until
    the job completes, fails, or ``max_attempts`` non-terminal answers have
    been seen.
    """

    def __init__(
        self,
        store: JobStore,
        client: StudioClient,
        *,
        interval: float | None = None,
        max_attempts: int | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.store = store
        self.client = client
        self.interval = settings.poll_interval_seconds if interval is None else interval
        self.max_attempts = settings.poll_max_attempts if max_attempts is None else max_attempts
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task[Job]] = {}

    async def submit(
        self,
        prompt: str,
        mode: GenerationMode = GenerationMode.text_to_video,
        image: str | None = None,
    ) -> Job:
        job = await self.store.create(prompt=prompt, mode=mode)
        try:
            res = await self.client.generate_video(prompt, mode=mode, image=image)
        except VideoServiceError as e:
            logger.warning("Submission for job %s failed: %s", job.id, e)
            return await self.store.fail(job.id, e.detail or SUBMIT_FAILED_MESSAGE)

        job = await self.store.attach_provider_job(job.id, res.prediction_id)
        self.start(job.id)
        return job

    def start(self, job_id: str) -> asyncio.Task[Job]:
        task = self._tasks.get(job_id)
        if task is not None and not task.done():
            return task
        task = asyncio.create_task(self._poll(job_id), name=f"poll-{job_id}")
        self._tasks[job_id] = task
        return task

    async def wait(self, job_id: str) -> Job:
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def wait_all(self) -> list[Job]:
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        return await self.store.snapshot()

    async def cancel(self, job_id: str) -> Job:
        task = self._tasks.get(job_id)
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if not job.is_terminal:
            job = await self.store.fail(job_id, CANCELLED_MESSAGE)
        return job

    async def aclose(self) -> None:
        """Stop all polling without touching the job records."""
        pending = [t for t in self._tasks.values() if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _poll(self, job_id: str) -> Job:
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if job.is_terminal:
            return job
        if job.provider_job_id is None:
            raise ValueError(f"Job {job_id} has no provider job to poll")

        attempts = 0
        while True:
            if attempts >= self.max_attempts:
                logger.info("Job %s timed out after %d attempts", job_id, attempts)
                return await self.store.fail(job_id, TIMEOUT_MESSAGE)

            try:
                report = await self.client.check_video(job.provider_job_id)
            except VideoServiceError as e:
                logger.warning("Status check for job %s failed: %s", job_id, e)
                return await self.store.fail(job_id, CHECK_FAILED_MESSAGE)

            if report.status == ProviderStatus.succeeded.value and report.video_url:
                logger.info("Job %s completed: %s", job_id, report.video_url)
                return await self.store.complete(job_id, report.video_url)
            if report.status == ProviderStatus.failed.value:
                logger.info("Job %s failed: %s", job_id, report.error)
                return await self.store.fail(job_id, report.error or GENERATION_FAILED_MESSAGE)
            if report.status not in (ProviderStatus.processing.value, ProviderStatus.succeeded.value):
                logger.warning("Job %s: unrecognized status %r, still waiting", job_id, report.status)

            attempts += 1
            await self._sleep(self.interval)
