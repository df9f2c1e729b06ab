"""Run a pull request review across all changed files."""

import asyncio
import logging
from collections import Counter

from reviewrag.constants import DEFAULT_LLM_TIMEOUT
from reviewrag.context.service import CodebaseContextService
from reviewrag.models import PullRequest, PullRequestFile, ReviewComment
from reviewrag.review.agents import AgentRegistry

logger = logging.getLogger(__name__)


class ReviewOrchestrator:
    """Reviews every changed file of a pull request concurrently.

    For each file, the review context is assembled in a worker thread and
    the file is handed to the agent for its extension. A file whose review
    fails or times out contributes no comments; the rest of the review
    continues.

    Args:
        registry: Agent lookup by file extension
        context_service: Builds the codebase context for each file
        llm_timeout: Seconds allowed for reviewing one file
    """

    def __init__(
        self,
        registry: AgentRegistry,
        context_service: CodebaseContextService,
        llm_timeout: float = DEFAULT_LLM_TIMEOUT,
    ) -> None:
        self.registry = registry
        self.context_service = context_service
        self.llm_timeout = llm_timeout

    async def review_pull_request(
        self,
        pull_request: PullRequest,
        files: list[PullRequestFile],
        project: str,
        repository_id: str,
    ) -> list[ReviewComment]:
        """Review all changed files and pool their comments in file order."""
        logger.info(
            f"🤖 Reviewing PR {pull_request.id} '{pull_request.title}' ({len(files)} files)"
        )
        tasks = [
            self._review_file(file, pull_request, project, repository_id)
            for file in files
        ]
        results = await asyncio.gather(*tasks)

        comments = [comment for file_comments in results for comment in file_comments]
        logger.info(f"✅ Review of PR {pull_request.id} produced {len(comments)} comments")
        return comments

    async def _review_file(
        self,
        file: PullRequestFile,
        pull_request: PullRequest,
        project: str,
        repository_id: str,
    ) -> list[ReviewComment]:
        if file.is_deleted:
            logger.debug(f"Skipping deleted file {file.path}")
            return []

        agent = self.registry.agent_for(file.path)
        if agent is None:
            logger.debug(f"Skipping {file.path}: no file extension")
            return []

        try:
            context = await asyncio.to_thread(
                self.context_service.build_review_context,
                file,
                pull_request,
                project,
                repository_id,
            )
            return await asyncio.wait_for(
                agent.review_file(file, context), timeout=self.llm_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"⚠️ Review of {file.path} timed out after {self.llm_timeout}s")
        except Exception as e:
            logger.error(f"❌ Error reviewing {file.path}: {e}", exc_info=True)
        return []


def summarize_review(
    pull_request: PullRequest, files: list[PullRequestFile], comments: list[ReviewComment]
) -> str:
    """Plain-text summary of a review, with counts by severity and type."""
    lines = [
        f"Code Review Summary for PR #{pull_request.id}: {pull_request.title}",
        f"Files changed: {len(files)}",
        f"Total comments: {len(comments)}",
    ]
    if comments:
        by_severity = Counter(comment.severity for comment in comments)
        by_type = Counter(comment.comment_type for comment in comments)
        lines.append("")
        lines.append("By severity:")
        for severity in ("high", "medium", "low"):
            if by_severity[severity]:
                lines.append(f"  {severity}: {by_severity[severity]}")
        for severity, count in sorted(by_severity.items()):
            if severity not in ("high", "medium", "low"):
                lines.append(f"  {severity}: {count}")
        lines.append("By type:")
        for comment_type, count in sorted(by_type.items()):
            lines.append(f"  {comment_type}: {count}")
    return "\n".join(lines)
