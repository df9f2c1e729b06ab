"""Tests for background indexing jobs."""

import threading
from unittest.mock import MagicMock

import pytest

from reviewrag.context.jobs import IndexJob, IndexJobTracker, JobStatus


@pytest.fixture
def context_service():
    service = MagicMock()
    service.is_indexed.return_value = False
    service.is_indexing.return_value = False
    service.chunk_count.return_value = 0
    service.index_repository.return_value = 12
    return service


@pytest.fixture
def tracker(context_service):
    tracker = IndexJobTracker(context_service)
    yield tracker
    tracker.shutdown()


class TestIndexJob:
    """Tests for the IndexJob record."""

    def test_to_dict(self):
        job = IndexJob(repository_id="repo", project="Proj")
        data = job.to_dict()
        assert data["repositoryId"] == "repo"
        assert data["status"] == "pending"
        assert data["startedAt"] is None
        assert data["durationSeconds"] is None

    def test_is_active(self):
        job = IndexJob(repository_id="repo", project="Proj")
        assert job.is_active
        job.status = JobStatus.FAILED
        assert not job.is_active


class TestIndexJobTracker:
    """Tests for IndexJobTracker."""

    def test_runs_to_completion(self, tracker, context_service):
        job = tracker.submit("Proj", "repo", "develop")
        finished = tracker.wait("repo", timeout=5)

        assert finished is job
        assert job.status == JobStatus.DONE
        assert job.chunks_indexed == 12
        assert job.duration_seconds is not None
        context_service.index_repository.assert_called_once_with("Proj", "repo", "develop")

    def test_duplicate_submit_returns_active_job(self, tracker, context_service):
        """Test a second submit while indexing does not start another run."""
        release = threading.Event()
        context_service.index_repository.side_effect = lambda *args: release.wait(5) and 3

        first = tracker.submit("Proj", "repo")
        second = tracker.submit("Proj", "repo")
        assert second is first
        assert tracker.is_indexing("repo")

        release.set()
        tracker.wait("repo", timeout=5)
        assert context_service.index_repository.call_count == 1
        assert not tracker.is_indexing("repo")
        assert first.chunks_indexed == 3

    def test_already_indexed(self, tracker, context_service):
        """Test an existing index is reported as done without re-indexing."""
        context_service.is_indexed.return_value = True
        context_service.chunk_count.return_value = 40

        job = tracker.submit("Proj", "repo")

        assert job.status == JobStatus.DONE
        assert job.chunks_indexed == 40
        context_service.index_repository.assert_not_called()

    def test_force_reindexes(self, tracker, context_service):
        context_service.is_indexed.return_value = True
        tracker.submit("Proj", "repo", force=True)
        tracker.wait("repo", timeout=5)
        context_service.index_repository.assert_called_once()

    def test_failure_recorded(self, tracker, context_service):
        """Test an exception marks the job failed with its message."""
        context_service.index_repository.side_effect = RuntimeError("host unreachable")

        tracker.submit("Proj", "repo")
        job = tracker.wait("repo", timeout=5)

        assert job.status == JobStatus.FAILED
        assert job.error == "host unreachable"

    def test_resubmit_after_failure(self, tracker, context_service):
        context_service.index_repository.side_effect = [RuntimeError("boom"), 7]
        tracker.submit("Proj", "repo")
        tracker.wait("repo", timeout=5)

        job = tracker.submit("Proj", "repo")
        tracker.wait("repo", timeout=5)
        assert job.status == JobStatus.DONE
        assert job.chunks_indexed == 7

    def test_unknown_repository(self, tracker):
        assert tracker.get("nope") is None
        assert tracker.wait("nope") is None
        assert not tracker.is_indexing("nope")

    def test_run_outside_tracker_counts_as_indexing(self, tracker, context_service):
        """Test a synchronous run on the service blocks a tracked one."""
        context_service.is_indexing.return_value = True
        context_service.chunk_count.return_value = 5

        job = tracker.submit("Proj", "repo")

        assert job.status == JobStatus.RUNNING
        assert job.chunks_indexed == 5
        assert tracker.is_indexing("repo")
        assert tracker.get("repo") is None
        context_service.index_repository.assert_not_called()

        context_service.is_indexing.return_value = False
        assert not tracker.is_indexing("repo")
