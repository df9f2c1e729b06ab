"""Shared configuration for route modules."""

import threading
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ReviewResult:
    """The most recent review started through the API."""

    pull_request: Any
    files: list
    comments: list
    project: str
    repository: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "pullRequest": self.pull_request.to_dict(),
            "files": [f.to_dict() for f in self.files],
            "comments": [c.to_dict() for c in self.comments],
            "project": self.project,
            "repository": self.repository,
        }


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    This replaces global variables with a proper configuration object
    that can be passed around and tested more easily.
    """

    llm_service: Any = None
    context_service: Any = None
    job_tracker: Any = None
    orchestrator: Any = None
    current_review: ReviewResult | None = None
    review_lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def host(self) -> Any:
        return self.context_service.host if self.context_service else None


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(
    llm_service: Any = None,
    context_service: Any = None,
    job_tracker: Any = None,
    orchestrator: Any = None,
) -> None:
    """Initialize the shared route configuration.

    Args:
        llm_service: LLM service instance
        context_service: CodebaseContextService shared by all routes
        job_tracker: IndexJobTracker for background indexing
        orchestrator: ReviewOrchestrator used by review routes
    """
    if llm_service is not None:
        _config.llm_service = llm_service
    if context_service is not None:
        _config.context_service = context_service
    if job_tracker is not None:
        _config.job_tracker = job_tracker
    if orchestrator is not None:
        _config.orchestrator = orchestrator
