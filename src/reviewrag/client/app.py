"""Flask web application for context-aware pull request review.

This module provides REST endpoints to index repositories, poll index
status, and run reviews whose prompts include retrieved codebase context.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask

from reviewrag.client.routes import health_bp, index_bp, init_config, review_bp
from reviewrag.constants import DEFAULT_LLM_TIMEOUT
from reviewrag.review import AgentRegistry, ReviewOrchestrator
from reviewrag.service.components import (
    get_context_service,
    get_job_tracker,
    shutdown_services,
)

# Configure logging
log_level = os.getenv("LOG_LEVEL", "DEBUG")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")

# Create Flask app
app = Flask(__name__)
logger.debug("Flask app created")

# Register blueprints
app.register_blueprint(health_bp)
app.register_blueprint(index_bp)
app.register_blueprint(review_bp)


def initialize_services():
    """Initialize the context engine, job tracker and reviewers on startup."""
    logger.info("🔧 Initializing services...")

    context_service = get_context_service()
    llm_service = context_service.llm_service
    logger.info("✅ LLM service initialized successfully")

    orchestrator = ReviewOrchestrator(
        AgentRegistry.default(llm_service),
        context_service,
        llm_timeout=float(os.getenv("LLM_TIMEOUT_SECONDS", str(DEFAULT_LLM_TIMEOUT))),
    )

    # Initialize route configuration
    init_config(
        llm_service=llm_service,
        context_service=context_service,
        job_tracker=get_job_tracker(),
        orchestrator=orchestrator,
    )


def create_app():
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting reviewrag Flask application...")

    print("📦 Initializing services...")
    initialize_services()
    print("✅ Services initialized successfully")

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    try:
        # The reloader would start a second process with its own in-memory index
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        shutdown_services()


if __name__ == "__main__":
    main()
