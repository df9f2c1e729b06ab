"""Interface the context engine and reviewers need from a source-control host."""

from typing import Protocol

from reviewrag.models import PullRequest, PullRequestFile, ReviewComment


class HostClient(Protocol):
    """Protocol for source-control host clients.

    The context engine only needs ``list_files`` and ``get_file_content``;
    the review pipeline uses the pull request and comment methods.
    """

    def list_files(self, project: str, repository_id: str, branch: str) -> list[str]:
        """List the paths of all files in a repository at a branch."""
        ...

    def get_file_content(self, project: str, repository_id: str, path: str, ref: str) -> str:
        """Get a file's content at a branch or commit, or "" if it does not exist."""
        ...

    def get_pull_request(
        self, project: str, repository: str, pull_request_id: int
    ) -> PullRequest | None:
        ...

    def get_active_pull_requests(self, project: str, repository: str) -> list[PullRequest]:
        ...

    def get_pull_request_files(
        self, project: str, repository: str, pull_request_id: int
    ) -> list[PullRequestFile]:
        ...

    def post_comment(
        self, project: str, repository: str, pull_request_id: int, comment: ReviewComment
    ) -> bool:
        ...
