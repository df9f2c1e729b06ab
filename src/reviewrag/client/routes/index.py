"""Repository indexing API routes."""

import logging

from flask import Blueprint, jsonify, request

from reviewrag.client.routes.config import get_config
from reviewrag.constants import DEFAULT_INDEX_BRANCH

logger = logging.getLogger(__name__)

index_bp = Blueprint("index", __name__)


def index_status(repository_id: str) -> dict:
    """Index status of a repository as returned by the API."""
    config = get_config()
    job = config.job_tracker.get(repository_id) if config.job_tracker else None
    return {
        "repositoryId": repository_id,
        "isIndexed": config.context_service.is_indexed(repository_id),
        "isIndexing": config.job_tracker.is_indexing(repository_id) if config.job_tracker else False,
        "chunkCount": config.context_service.chunk_count(repository_id),
        "job": job.to_dict() if job else None,
    }


def _index_request() -> tuple[dict | None, tuple | None]:
    data = request.get_json(silent=True)
    if not data or not data.get("project") or not data.get("repositoryId"):
        logger.warning("❌ Missing 'project' or 'repositoryId' in index request")
        return None, (jsonify({"error": "Missing 'project' or 'repositoryId' field"}), 400)
    return data, None


@index_bp.route("/api/index", methods=["POST"])
def index_repository():
    """Index a repository synchronously.

    Request:
        {"project": "MyProject", "repositoryId": "my-repo", "branch": "main"}

    Response:
        {"repositoryId": "my-repo", "branch": "main", "chunkCount": 42}
    """
    config = get_config()
    data, error = _index_request()
    if error:
        return error

    repository_id = data["repositoryId"]
    branch = data.get("branch") or DEFAULT_INDEX_BRANCH
    logger.info(f"📨 Received index request for {repository_id}")
    try:
        chunk_count = config.context_service.index_repository(
            data["project"], repository_id, branch
        )
    except Exception as e:
        logger.error(f"❌ Error indexing {repository_id}: {e}", exc_info=True)
        return jsonify({"error": f"Failed to index repository: {e}"}), 500

    return jsonify({"repositoryId": repository_id, "branch": branch, "chunkCount": chunk_count})


@index_bp.route("/api/index/background", methods=["POST"])
def index_repository_background():
    """Queue background indexing of a repository.

    A repository that is already being indexed is not queued twice; the
    in-flight job is returned instead.

    Request:
        {"project": "MyProject", "repositoryId": "my-repo", "branch": "main", "force": false}

    Returns:
        202 with the job status
    """
    config = get_config()
    data, error = _index_request()
    if error:
        return error

    job = config.job_tracker.submit(
        data["project"],
        data["repositoryId"],
        data.get("branch") or DEFAULT_INDEX_BRANCH,
        force=bool(data.get("force", False)),
    )
    return jsonify(job.to_dict()), 202


@index_bp.route("/api/index/status/<repository_id>", methods=["GET"])
def get_index_status(repository_id: str):
    """Get the index status of a repository."""
    return jsonify(index_status(repository_id))
