"""Health check API route."""

from flask import Blueprint, jsonify

from reviewrag.client.routes.config import get_config

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status
    """
    config = get_config()
    context_service = config.context_service
    return jsonify(
        {
            "status": "healthy",
            "llm_service": "initialized" if config.llm_service else "not initialized",
            "context_service": "initialized" if context_service else "not initialized",
            "indexed_repositories": context_service.store.repositories() if context_service else [],
        }
    )
