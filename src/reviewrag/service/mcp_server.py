"""FastMCP server exposing repository indexing and review context."""

import asyncio
import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP

from reviewrag.constants import DEFAULT_INDEX_BRANCH
from reviewrag.host.base import HostClient
from reviewrag.service.components import get_context_service, shutdown_services

# Configure logging
log_level = os.getenv("LOG_LEVEL", "DEBUG")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded for MCP server")

# Create FastMCP instance
mcp = FastMCP("reviewrag Codebase Context")


async def index_repository_impl(
    project: str, repository_id: str, branch: str = DEFAULT_INDEX_BRANCH
) -> dict[str, Any]:
    """Index a repository and report how many chunks were stored."""
    logger.debug(f"MCP Tool: index_repository project={project} repository={repository_id}")
    try:
        chunk_count = await asyncio.to_thread(
            get_context_service().index_repository, project, repository_id, branch
        )
    except Exception as e:
        error_msg = f"Unexpected error: {type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}", exc_info=True)
        raise ValueError(error_msg) from e

    logger.info(f"✅ MCP Tool: Indexed {chunk_count} chunks for {repository_id}")
    return {"repository_id": repository_id, "branch": branch, "chunk_count": chunk_count}


async def get_index_status_impl(repository_id: str) -> dict[str, Any]:
    """Report whether a repository is indexed and its chunk count."""
    service = get_context_service()
    return {
        "repository_id": repository_id,
        "is_indexed": service.is_indexed(repository_id),
        "chunk_count": service.chunk_count(repository_id),
    }


async def get_review_context_impl(
    project: str, repository_id: str, pull_request_id: int, file_path: str | None = None
) -> list[dict[str, str]]:
    """Assemble review context for the changed files of a pull request."""
    logger.debug(
        f"MCP Tool: get_review_context repository={repository_id} pr={pull_request_id}"
    )
    service = get_context_service()
    host: HostClient = service.host
    try:
        pull_request = host.get_pull_request(project, repository_id, pull_request_id)
        if pull_request is None:
            raise ValueError(f"Pull request {pull_request_id} not found")
        files = host.get_pull_request_files(project, repository_id, pull_request_id)
    except ValueError:
        raise
    except Exception as e:
        error_msg = f"Unexpected error: {type(e).__name__}: {e}"
        logger.error(f"❌ MCP Tool: {error_msg}", exc_info=True)
        raise ValueError(error_msg) from e

    if file_path:
        files = [f for f in files if f.path == file_path]

    results = []
    for file in files:
        if file.is_deleted:
            continue
        context = await asyncio.to_thread(
            service.build_review_context, file, pull_request, project, repository_id
        )
        results.append({"path": file.path, "context": context})
    logger.info(f"✅ MCP Tool: Built context for {len(results)} files")
    return results


@mcp.tool()
async def index_repository(
    project: str, repository_id: str, branch: str = DEFAULT_INDEX_BRANCH
) -> dict[str, Any]:
    """
    Indexes a repository's source files into searchable, embedded chunks.
    Re-indexing replaces the previous index for that repository.

    Args:
        project: Azure DevOps project name
        repository_id: Repository name or id
        branch: Branch to index (default: main)
    """
    return await index_repository_impl(project, repository_id, branch)


@mcp.tool()
async def get_index_status(repository_id: str) -> dict[str, Any]:
    """
    Reports whether a repository has been indexed and how many chunks it holds.

    Args:
        repository_id: Repository name or id
    """
    return await get_index_status_impl(repository_id)


@mcp.tool()
async def get_review_context(
    project: str, repository_id: str, pull_request_id: int, file_path: str | None = None
) -> list[dict[str, str]]:
    """
    Builds the review context (pull request header, similar code, and
    imported files) for each changed file in a pull request. Use this before
    reviewing a pull request so the review can account for the rest of the
    codebase.

    Args:
        project: Azure DevOps project name
        repository_id: Repository name or id
        pull_request_id: Pull request number
        file_path: Optional path to build context for a single file
    """
    return await get_review_context_impl(project, repository_id, pull_request_id, file_path)


def main() -> None:
    """Entry point for the MCP server."""
    logger.info("🚀 Starting reviewrag MCP server...")
    try:
        mcp.run(transport="sse", host="0.0.0.0", port=int(os.getenv("MCP_PORT", "8001")))
    finally:
        shutdown_services()


if __name__ == "__main__":
    main()
