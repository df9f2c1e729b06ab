"""Language review agents and pull request review orchestration."""

from reviewrag.review.agents import (
    AgentRegistry,
    DotNetReviewAgent,
    GeneralReviewAgent,
    PythonReviewAgent,
    ReviewAgent,
    RustReviewAgent,
)
from reviewrag.review.orchestrator import ReviewOrchestrator, summarize_review
from reviewrag.review.parsing import parse_review_comments

__all__ = [
    "AgentRegistry",
    "DotNetReviewAgent",
    "GeneralReviewAgent",
    "PythonReviewAgent",
    "ReviewAgent",
    "ReviewOrchestrator",
    "RustReviewAgent",
    "parse_review_comments",
    "summarize_review",
]
