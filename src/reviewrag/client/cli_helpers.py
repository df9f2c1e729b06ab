"""Helper functions for CLI commands."""

import logging
import os

import click

from reviewrag.context.service import CodebaseContextService
from reviewrag.service.components import build_context_service


def configure_logging() -> None:
    """Send log output to stderr at LOG_LEVEL (default WARNING for the CLI)."""
    log_level = os.getenv("LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def ensure_context_service() -> CodebaseContextService:
    """Build the context service or abort with a readable error.

    Inside a click command the service is closed when the command finishes.

    Raises:
        click.Abort: If the host or settings are not configured
    """
    try:
        service = build_context_service()
    except ValueError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        click.echo("\nSet ADO_ORGANIZATION and ADO_PAT (for example in .env).", err=True)
        raise click.Abort()

    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        ctx.call_on_close(service.close)
    return service


def index_or_abort(
    service: CodebaseContextService, project: str, repository: str, branch: str
) -> int:
    """Index a repository, reporting progress on the terminal.

    Raises:
        click.Abort: If indexing raises
    """
    click.echo(f"📦 Indexing {project}/{repository} at '{branch}'...")
    try:
        chunk_count = service.index_repository(project, repository, branch)
    except Exception as e:
        click.echo(f"✗ Error indexing repository: {e}", err=True)
        raise click.Abort()
    if chunk_count:
        click.echo(f"✓ Indexed {chunk_count} chunk(s)")
    else:
        click.echo("⚠️  No chunks indexed; review context will not include similar code")
    return chunk_count


def format_comment(index: int, comment: dict, max_length: int = 300) -> str:
    """Format a review comment for display.

    Args:
        index: Comment number (1-based)
        comment: Comment dict as produced by ``ReviewComment.to_dict``
        max_length: Maximum comment length before truncation

    Returns:
        Formatted string for display
    """
    text = comment["commentText"]
    display_text = text[:max_length] + "..." if len(text) > max_length else text
    lines = [
        f"{index}. [{comment['severity']}/{comment['commentType']}] "
        f"{comment['filePath']}:{comment['lineNumber']}",
        f"   {display_text}",
        "",
    ]
    return "\n".join(lines)
