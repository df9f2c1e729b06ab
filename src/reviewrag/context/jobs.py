"""Tracked background indexing jobs with per-repository de-duplication."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from reviewrag.constants import DEFAULT_INDEX_BRANCH, DEFAULT_INDEX_WORKERS

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class IndexJob:
    """Status of one indexing run for a repository."""

    repository_id: str
    project: str
    branch: str = DEFAULT_INDEX_BRANCH
    status: JobStatus = JobStatus.PENDING
    chunks_indexed: int = 0
    error: str | None = None
    submitted_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in (JobStatus.PENDING, JobStatus.RUNNING)

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "repositoryId": self.repository_id,
            "project": self.project,
            "branch": self.branch,
            "status": self.status.value,
            "chunksIndexed": self.chunks_indexed,
            "error": self.error,
            "submittedAt": self.submitted_at.isoformat(),
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "durationSeconds": self.duration_seconds,
        }


class IndexJobTracker:
    """Runs indexing jobs on a thread pool and tracks their status.

    At most one job per repository is pending or running at a time. A second
    submit for the same repository returns the in-flight job instead of
    starting another run. Runs started outside the tracker, such as a CLI
    or MCP index call on the same service, count as in flight too.

    Args:
        context_service: Object with ``index_repository``, ``is_indexed``,
            ``is_indexing`` and ``chunk_count`` (normally a
            ``CodebaseContextService``)
        max_workers: Jobs that may run at once
    """

    def __init__(self, context_service: Any, max_workers: int = DEFAULT_INDEX_WORKERS) -> None:
        self.context_service = context_service
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="index")
        self._lock = threading.Lock()
        self._jobs: dict[str, IndexJob] = {}
        self._futures: dict[str, Future] = {}

    def submit(
        self,
        project: str,
        repository_id: str,
        branch: str = DEFAULT_INDEX_BRANCH,
        force: bool = False,
    ) -> IndexJob:
        """Start indexing a repository unless it is already indexed or indexing.

        Args:
            project: Host project name
            repository_id: Repository to index
            branch: Branch to read files from
            force: Re-index even when an index already exists

        Returns:
            IndexJob: The in-flight job, a new pending job, or a completed job
            describing the existing index
        """
        with self._lock:
            existing = self._jobs.get(repository_id)
            if existing is not None and existing.is_active:
                logger.info(f"⏳ Indexing already in progress for {repository_id}")
                return existing

            if self.context_service.is_indexing(repository_id):
                logger.info(
                    f"⏳ Indexing already in progress for {repository_id} outside the tracker"
                )
                return IndexJob(
                    repository_id=repository_id,
                    project=project,
                    branch=branch,
                    status=JobStatus.RUNNING,
                    chunks_indexed=self.context_service.chunk_count(repository_id),
                )

            if not force and self.context_service.is_indexed(repository_id):
                job = IndexJob(
                    repository_id=repository_id,
                    project=project,
                    branch=branch,
                    status=JobStatus.DONE,
                    chunks_indexed=self.context_service.chunk_count(repository_id),
                )
                job.started_at = job.finished_at = job.submitted_at
                self._jobs[repository_id] = job
                logger.debug(f"Repository {repository_id} already indexed")
                return job

            job = IndexJob(repository_id=repository_id, project=project, branch=branch)
            self._jobs[repository_id] = job
            self._futures[repository_id] = self._executor.submit(self._run, job)
            logger.info(f"📦 Queued background indexing for {repository_id}")
            return job

    def _run(self, job: IndexJob) -> None:
        job.started_at = _now()
        job.status = JobStatus.RUNNING
        try:
            count = self.context_service.index_repository(
                job.project, job.repository_id, job.branch
            )
        except Exception as e:
            job.error = str(e)
            job.finished_at = _now()
            job.status = JobStatus.FAILED
            logger.error(
                f"❌ Background indexing failed for {job.repository_id}: {e}", exc_info=True
            )
            return

        job.chunks_indexed = count
        job.finished_at = _now()
        job.status = JobStatus.DONE
        logger.info(
            f"✅ Background indexing finished for {job.repository_id}: {count} chunks"
        )

    def get(self, repository_id: str) -> IndexJob | None:
        return self._jobs.get(repository_id)

    def is_indexing(self, repository_id: str) -> bool:
        job = self._jobs.get(repository_id)
        if job is not None and job.is_active:
            return True
        return self.context_service.is_indexing(repository_id)

    def wait(self, repository_id: str, timeout: float | None = None) -> IndexJob | None:
        """Block until the repository's current job finishes or the timeout expires."""
        future = self._futures.get(repository_id)
        if future is not None:
            try:
                future.result(timeout=timeout)
            except FutureTimeoutError:
                logger.warning(f"⚠️ Timed out waiting for indexing of {repository_id}")
        return self._jobs.get(repository_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
