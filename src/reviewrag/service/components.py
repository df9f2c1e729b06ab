"""Process-wide construction of the host client and context engine.

Front doors (CLI, Flask app, MCP server) share one ``CodebaseContextService``
per process so that every caller sees the same in-memory index.
"""

import logging
import threading

from dotenv import load_dotenv

from reviewrag.config import ContextSettings
from reviewrag.context.jobs import IndexJobTracker
from reviewrag.context.service import CodebaseContextService
from reviewrag.host.azure_devops import AzureDevOpsClient
from reviewrag.llm import get_llm_service

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_context_service: CodebaseContextService | None = None
_job_tracker: IndexJobTracker | None = None


def build_context_service(
    host=None, llm_service=None, settings: ContextSettings | None = None
) -> CodebaseContextService:
    """Create a context service, filling missing collaborators from the environment.

    Raises:
        ValueError: If the host is not configured or a setting is invalid
    """
    host = host or AzureDevOpsClient.from_env()
    llm_service = llm_service or get_llm_service()
    settings = settings or ContextSettings.from_env()
    logger.debug(f"Context settings: {settings}")
    return CodebaseContextService(host, llm_service, settings=settings)


def get_context_service() -> CodebaseContextService:
    """Get the shared context service, creating it on first use."""
    global _context_service
    with _lock:
        if _context_service is None:
            _context_service = build_context_service()
            logger.info("✅ Context service initialized")
        return _context_service


def get_job_tracker() -> IndexJobTracker:
    """Get the shared background indexing tracker, creating it on first use."""
    global _job_tracker
    context_service = get_context_service()
    with _lock:
        if _job_tracker is None:
            _job_tracker = IndexJobTracker(context_service)
        return _job_tracker


def shutdown_services() -> None:
    """Stop the shared tracker and release the shared service's threads."""
    global _context_service, _job_tracker
    with _lock:
        tracker, _job_tracker = _job_tracker, None
        context_service, _context_service = _context_service, None
    if tracker is not None:
        tracker.shutdown(wait=False)
    if context_service is not None:
        context_service.close()
        logger.info("🛑 Context service closed")
