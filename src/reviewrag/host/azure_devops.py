"""Azure DevOps REST client."""

import difflib
import logging
import re
from typing import Any

import requests
from pydantic import ValidationError

from reviewrag.config import AzureDevOpsConfig
from reviewrag.constants import DEFAULT_ADO_API_VERSION, DEFAULT_HOST_TIMEOUT
from reviewrag.errors import HostAPIError
from reviewrag.host.models import (
    CommentThread,
    GitItem,
    GitItemList,
    IterationChanges,
    IterationList,
    PullRequestList,
    PullRequestPayload,
)
from reviewrag.models import PullRequest, PullRequestFile, PullRequestUser, ReviewComment

logger = logging.getLogger(__name__)

_COMMIT_ID = re.compile(r"^[0-9a-fA-F]{40}$")


def to_pull_request(payload: PullRequestPayload) -> PullRequest:
    return PullRequest(
        id=payload.pull_request_id,
        title=payload.title,
        description=payload.description or "",
        source_branch=payload.source_ref_name,
        target_branch=payload.target_ref_name,
        status=payload.status,
        created_by=PullRequestUser(
            display_name=payload.created_by.display_name,
            unique_name=payload.created_by.unique_name,
        ),
        creation_date=payload.creation_date,
    )


def unified_diff(previous: str, current: str, path: str) -> str:
    """Unified diff between two versions of a file."""
    return "\n".join(
        difflib.unified_diff(
            previous.split("\n") if previous else [],
            current.split("\n") if current else [],
            fromfile=f"a{path}",
            tofile=f"b{path}",
            lineterm="",
        )
    )


def format_comment(comment: ReviewComment) -> str:
    return f"**[{comment.severity.upper()}] {comment.comment_type}**: {comment.comment_text}"


class AzureDevOpsClient:
    """Thin client over the Azure DevOps Git REST API.

    Every request carries a bounded timeout. Failed requests raise
    ``HostAPIError``, except that a missing file reads as "" and a failed
    comment post returns False.

    Args:
        organization: Azure DevOps organization name
        personal_access_token: PAT with code read (and, for posting, write) scope
        base_url: REST root; defaults to https://dev.azure.com/<organization>/
        timeout: Seconds per request
        api_version: REST API version
    """

    def __init__(
        self,
        organization: str,
        personal_access_token: str,
        base_url: str | None = None,
        timeout: float = DEFAULT_HOST_TIMEOUT,
        api_version: str = DEFAULT_ADO_API_VERSION,
    ) -> None:
        self.organization = organization
        self.base_url = (base_url or f"https://dev.azure.com/{organization}").rstrip("/") + "/"
        self.timeout = timeout
        self.api_version = api_version
        self.session = requests.Session()
        self.session.auth = ("", personal_access_token)
        self.session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_env(cls) -> "AzureDevOpsClient":
        """Create a client from ADO_* environment variables.

        Raises:
            ValueError: If the organization or PAT is not configured
        """
        if not AzureDevOpsConfig.is_configured():
            raise ValueError("ADO_ORGANIZATION and ADO_PAT must be set")
        return cls(
            organization=AzureDevOpsConfig.get_organization(),
            personal_access_token=AzureDevOpsConfig.get_personal_access_token(),
            base_url=AzureDevOpsConfig.get_base_url(),
            timeout=AzureDevOpsConfig.get_timeout(),
            api_version=AzureDevOpsConfig.get_api_version(),
        )

    def _git_url(self, project: str, repository: str, suffix: str = "") -> str:
        return f"{self.base_url}{project}/_apis/git/repositories/{repository}{suffix}"

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        allow_not_found: bool = False,
    ) -> requests.Response | None:
        query = {"api-version": self.api_version, **(params or {})}
        try:
            response = self.session.request(
                method, url, params=query, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise HostAPIError(f"{method} {url} failed: {e}") from e

        if allow_not_found and response.status_code == 404:
            return None
        if not response.ok:
            raise HostAPIError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = self._request("GET", url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise HostAPIError(f"GET {url} returned invalid JSON: {e}") from e

    def _parse(self, model, data: Any, url: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise HostAPIError(f"Unexpected response from {url}: {e}") from e

    def list_files(self, project: str, repository_id: str, branch: str = "main") -> list[str]:
        """List the paths of all files (not folders) in a repository at a branch."""
        url = self._git_url(project, repository_id, "/items")
        data = self._get_json(
            url,
            {
                "scopePath": "/",
                "recursionLevel": "Full",
                "versionDescriptor.version": branch,
                "versionDescriptor.versionType": "branch",
            },
        )
        items = self._parse(GitItemList, data, url)
        files = [item.path for item in items.value if not item.is_folder and item.path]
        logger.info(f"📂 Found {len(files)} files in repository {repository_id}")
        return files

    def get_file_content(self, project: str, repository_id: str, path: str, ref: str) -> str:
        """Get a file's content at a branch name or commit id.

        Returns:
            str: File content, or "" when the file does not exist at ``ref``
        """
        url = self._git_url(project, repository_id, "/items")
        version_type = "commit" if _COMMIT_ID.match(ref) else "branch"
        response = self._request(
            "GET",
            url,
            params={
                "path": path,
                "includeContent": "true",
                "versionDescriptor.version": ref,
                "versionDescriptor.versionType": version_type,
            },
            allow_not_found=True,
        )
        if response is None:
            logger.debug(f"File {path} not found at {ref}")
            return ""
        try:
            item = self._parse(GitItem, response.json(), url)
        except ValueError:
            # Some servers answer with the raw file body
            return response.text
        return item.content or ""

    def _get_blob(self, project: str, repository_id: str, object_id: str) -> str:
        url = self._git_url(project, repository_id, f"/blobs/{object_id}")
        response = self._request("GET", url, params={"$format": "text"}, allow_not_found=True)
        return response.text if response is not None else ""

    def _get_pull_request_payload(
        self, project: str, repository: str, pull_request_id: int
    ) -> PullRequestPayload:
        url = self._git_url(project, repository, f"/pullRequests/{pull_request_id}")
        return self._parse(PullRequestPayload, self._get_json(url), url)

    def get_pull_request(
        self, project: str, repository: str, pull_request_id: int
    ) -> PullRequest | None:
        """Get pull request metadata, or None if it does not exist."""
        url = self._git_url(project, repository, f"/pullRequests/{pull_request_id}")
        response = self._request("GET", url, allow_not_found=True)
        if response is None:
            logger.warning(f"⚠️ Pull request {pull_request_id} not found in {repository}")
            return None
        return to_pull_request(self._parse(PullRequestPayload, response.json(), url))

    def get_active_pull_requests(self, project: str, repository: str) -> list[PullRequest]:
        url = self._git_url(project, repository, "/pullrequests")
        data = self._get_json(url, {"searchCriteria.status": "active"})
        pull_requests = [to_pull_request(p) for p in self._parse(PullRequestList, data, url).value]
        logger.info(f"📋 Found {len(pull_requests)} active pull requests in {repository}")
        return pull_requests

    def get_pull_request_files(
        self, project: str, repository: str, pull_request_id: int
    ) -> list[PullRequestFile]:
        """Get the files changed in a pull request's latest iteration.

        Current content is read at the source commit and previous content at
        the target commit, then diffed.

        Returns:
            list[PullRequestFile]: Changed files, folders excluded
        """
        logger.info(f"🔍 Fetching file changes for PR {pull_request_id} in {repository}")
        payload = self._get_pull_request_payload(project, repository, pull_request_id)
        source_commit = (
            payload.last_merge_source_commit.commit_id if payload.last_merge_source_commit else ""
        )
        target_commit = (
            payload.last_merge_target_commit.commit_id if payload.last_merge_target_commit else ""
        )

        iterations_url = self._git_url(
            project, repository, f"/pullRequests/{pull_request_id}/iterations"
        )
        iterations = self._parse(IterationList, self._get_json(iterations_url), iterations_url)
        if not iterations.value:
            logger.warning(f"⚠️ No iterations found for PR {pull_request_id}")
            return []
        latest = iterations.value[-1].id

        changes_url = self._git_url(
            project, repository, f"/pullRequests/{pull_request_id}/iterations/{latest}/changes"
        )
        changes = self._parse(IterationChanges, self._get_json(changes_url), changes_url)

        files: list[PullRequestFile] = []
        for entry in changes.change_entries:
            item = entry.item
            if item is None or not item.path or item.is_folder:
                continue
            change_type = entry.change_type.lower()

            current = ""
            if "delete" not in change_type:
                if item.object_id:
                    current = self._get_blob(project, repository, item.object_id)
                elif source_commit:
                    current = self.get_file_content(project, repository, item.path, source_commit)

            previous = ""
            if "add" not in change_type and target_commit:
                previous = self.get_file_content(project, repository, item.path, target_commit)

            files.append(
                PullRequestFile(
                    path=item.path,
                    change_type=entry.change_type,
                    current_content=current,
                    previous_content=previous,
                    unified_diff=unified_diff(previous, current, item.path),
                )
            )
            logger.debug(f"Added file {item.path} with change type {entry.change_type}")

        logger.info(f"✅ Found {len(files)} changed files in PR {pull_request_id}")
        return files

    def post_comment(
        self, project: str, repository: str, pull_request_id: int, comment: ReviewComment
    ) -> bool:
        """Post a review comment as a new active thread.

        Comments with a positive line number are anchored to that line of
        the file; others are posted at file level.

        Returns:
            bool: True if the thread was created
        """
        thread: dict[str, Any] = {
            "comments": [
                {"parentCommentId": 0, "content": format_comment(comment), "commentType": 1}
            ],
            "status": 1,
        }
        if comment.file_path:
            context: dict[str, Any] = {"filePath": comment.file_path}
            if comment.line_number > 0:
                position = {"line": comment.line_number, "offset": 1}
                context["rightFileStart"] = position
                context["rightFileEnd"] = position
            thread["threadContext"] = context

        url = self._git_url(project, repository, f"/pullRequests/{pull_request_id}/threads")
        try:
            response = self._request("POST", url, json=thread)
            created = self._parse(CommentThread, response.json(), url)
        except (HostAPIError, ValueError) as e:
            logger.error(f"❌ Error posting comment to PR {pull_request_id}: {e}")
            return False

        logger.info(f"💬 Posted comment thread {created.id} to PR {pull_request_id}")
        return True

    def validate_credentials(self) -> tuple[bool, str | None]:
        """Check that the organization and PAT are accepted.

        Returns:
            tuple[bool, str | None]: (valid, error message)
        """
        try:
            self._get_json(f"{self.base_url}_apis/projects", {"$top": 1})
        except HostAPIError as e:
            if e.status_code in (401, 403):
                return False, "Invalid or expired personal access token"
            return False, str(e)
        return True, None
