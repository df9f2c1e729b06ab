"""Pull request review API routes."""

import logging

from flask import Blueprint, jsonify, request

from reviewrag.client.routes.config import ReviewResult, get_config
from reviewrag.client.routes.index import index_status
from reviewrag.errors import HostAPIError
from reviewrag.service.helpers import run_async

logger = logging.getLogger(__name__)

review_bp = Blueprint("review", __name__)


def _host_error_response(e: HostAPIError, what: str):
    if e.status_code in (401, 403):
        return (
            jsonify(
                {
                    "error": "Authentication failed. Your Personal Access Token may have "
                    "expired or doesn't have access to this organization/project.",
                    "requiresConfig": True,
                }
            ),
            401,
        )
    if e.status_code == 404:
        return jsonify({"error": f"{what} not found."}), 404
    return jsonify({"error": f"Failed to fetch {what.lower()}: {e}"}), 502


@review_bp.route("/api/pullrequests/<project>/<repository>", methods=["GET"])
def get_active_pull_requests(project: str, repository: str):
    """List active pull requests and start indexing the repository in the background.

    Response:
        {
            "pullRequests": [{"id": 42, "title": "...", ...}],
            "indexStatus": {"isIndexed": false, "isIndexing": true, "chunkCount": 0, ...}
        }
    """
    config = get_config()
    logger.info(f"📨 Fetching active PRs for {project}/{repository}")
    try:
        pull_requests = config.host.get_active_pull_requests(project, repository)
    except HostAPIError as e:
        logger.error(f"❌ Error fetching pull requests: {e}")
        return _host_error_response(e, f"Project '{project}' or repository '{repository}'")

    config.job_tracker.submit(project, repository)
    return jsonify(
        {
            "pullRequests": [pr.to_dict() for pr in pull_requests],
            "indexStatus": index_status(repository),
        }
    )


@review_bp.route("/api/review/start", methods=["POST"])
def start_review():
    """Review a pull request and keep the result as the current review.

    Request:
        {"project": "MyProject", "repository": "my-repo", "pullRequestId": 42}

    Response:
        {"pullRequest": {...}, "files": [...], "comments": [...], ...}
    """
    config = get_config()
    data = request.get_json(silent=True)
    if not data or not data.get("project") or not data.get("repository") or "pullRequestId" not in data:
        return jsonify({"error": "Missing 'project', 'repository' or 'pullRequestId' field"}), 400

    project = data["project"]
    repository = data["repository"]
    try:
        pull_request_id = int(data["pullRequestId"])
    except (TypeError, ValueError):
        return jsonify({"error": "'pullRequestId' must be an integer"}), 400

    logger.info(f"📨 Starting review for PR {pull_request_id} in {repository}")
    try:
        pull_request = config.host.get_pull_request(project, repository, pull_request_id)
        if pull_request is None:
            return jsonify({"error": "Pull request not found"}), 404
        files = config.host.get_pull_request_files(project, repository, pull_request_id)
    except HostAPIError as e:
        logger.error(f"❌ Error fetching pull request: {e}")
        return _host_error_response(e, "Pull request")

    try:
        comments = run_async(
            config.orchestrator.review_pull_request(pull_request, files, project, repository)
        )
    except Exception as e:
        logger.error(f"❌ Error reviewing PR {pull_request_id}: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    result = ReviewResult(
        pull_request=pull_request,
        files=files,
        comments=comments,
        project=project,
        repository=repository,
    )
    with config.review_lock:
        config.current_review = result
    return jsonify(result.to_dict())


@review_bp.route("/api/review/current", methods=["GET"])
def get_current_review():
    """Get the most recent review."""
    config = get_config()
    if config.current_review is None:
        return jsonify({"error": "No active review"}), 404
    return jsonify(config.current_review.to_dict())


@review_bp.route("/api/review/comment", methods=["POST"])
def post_comment():
    """Post one comment of the current review to the pull request.

    Request:
        {"commentId": "3f2a..."}

    Response:
        {"success": true, "comment": {...}}
    """
    config = get_config()
    data = request.get_json(silent=True)
    if not data or not data.get("commentId"):
        return jsonify({"error": "Missing 'commentId' field"}), 400

    review = config.current_review
    if review is None:
        return jsonify({"error": "No active review"}), 404

    comment = next((c for c in review.comments if c.id == data["commentId"]), None)
    if comment is None:
        return jsonify({"error": "Comment not found"}), 404
    if comment.posted:
        return jsonify({"success": True, "comment": comment.to_dict()})

    if not config.host.post_comment(
        review.project, review.repository, review.pull_request.id, comment
    ):
        return jsonify({"success": False, "error": "Failed to post comment"}), 502

    comment.posted = True
    return jsonify({"success": True, "comment": comment.to_dict()})
