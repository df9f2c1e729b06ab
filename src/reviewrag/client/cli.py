"""Command-line interface for reviewrag using Click."""

import asyncio

import click
from dotenv import load_dotenv

from reviewrag.client.cli_helpers import (
    configure_logging,
    ensure_context_service,
    format_comment,
    index_or_abort,
)
from reviewrag.constants import DEFAULT_INDEX_BRANCH, DEFAULT_LLM_TIMEOUT
from reviewrag.errors import HostAPIError
from reviewrag.review import AgentRegistry, ReviewOrchestrator, summarize_review

# Load environment variables
load_dotenv()


@click.command()
@click.argument("project", type=str)
@click.argument("repository", type=str)
@click.option(
    "--branch",
    type=str,
    default=DEFAULT_INDEX_BRANCH,
    help=f"Branch to index (default: '{DEFAULT_INDEX_BRANCH}')",
)
def index(project: str, repository: str, branch: str) -> None:
    """Index REPOSITORY in PROJECT into searchable code chunks.

    Example:
        reviewrag-index MyProject my-repo
        reviewrag-index MyProject my-repo --branch develop
    """
    configure_logging()
    service = ensure_context_service()
    chunk_count = index_or_abort(service, project, repository, branch)
    if not chunk_count:
        raise click.Abort()


@click.command()
@click.argument("project", type=str)
@click.argument("repository", type=str)
@click.option("--branch", type=str, default=DEFAULT_INDEX_BRANCH, help="Branch to index")
def status(project: str, repository: str, branch: str) -> None:
    """Index REPOSITORY and show its index status.

    The index lives in memory, so each invocation builds it afresh.

    Example:
        reviewrag-status MyProject my-repo
    """
    configure_logging()
    service = ensure_context_service()
    index_or_abort(service, project, repository, branch)
    index = service.store.get(repository)
    if index is None or not service.is_indexed(repository):
        click.echo(f"📊 Repository '{repository}' is not indexed")
        return
    files = {chunk.file_path for chunk in index.chunks}
    click.echo(f"📊 Repository '{repository}' index v{index.version}")
    click.echo(f"   Branch: {index.branch}")
    click.echo(f"   Files: {len(files)}")
    click.echo(f"   Chunks: {service.chunk_count(repository)}")
    click.echo(f"   Dimensions: {index.dimensions}")


@click.command()
@click.argument("project", type=str)
@click.argument("repository", type=str)
@click.argument("pull_request_id", type=int)
@click.option("--file", "file_path", type=str, default=None, help="Only show context for this path")
@click.option("--branch", type=str, default=DEFAULT_INDEX_BRANCH, help="Branch to index")
def context(
    project: str, repository: str, pull_request_id: int, file_path: str | None, branch: str
) -> None:
    """Print the review context assembled for a pull request's changed files.

    Example:
        reviewrag-context MyProject my-repo 42
        reviewrag-context MyProject my-repo 42 --file /src/app.py
    """
    configure_logging()
    service = ensure_context_service()
    try:
        pull_request = service.host.get_pull_request(project, repository, pull_request_id)
        if pull_request is None:
            click.echo(f"✗ Pull request {pull_request_id} not found", err=True)
            raise click.Abort()
        files = service.host.get_pull_request_files(project, repository, pull_request_id)
    except HostAPIError as e:
        click.echo(f"✗ Error fetching pull request: {e}", err=True)
        raise click.Abort()

    if file_path:
        files = [f for f in files if f.path == file_path]
    if not files:
        click.echo("No changed files to show.")
        return

    index_or_abort(service, project, repository, branch)
    for file in files:
        if file.is_deleted:
            continue
        click.echo(f"\n===== {file.path} =====\n")
        click.echo(service.build_review_context(file, pull_request, project, repository))


@click.command()
@click.argument("project", type=str)
@click.argument("repository", type=str)
@click.argument("pull_request_id", type=int)
@click.option("--post/--no-post", default=False, help="Post comments to the pull request")
@click.option("--skip-index", is_flag=True, default=False, help="Review without indexing first")
@click.option("--branch", type=str, default=DEFAULT_INDEX_BRANCH, help="Branch to index")
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_LLM_TIMEOUT,
    help=f"Seconds allowed per file review (default: {DEFAULT_LLM_TIMEOUT})",
)
def review(
    project: str,
    repository: str,
    pull_request_id: int,
    post: bool,
    skip_index: bool,
    branch: str,
    timeout: float,
) -> None:
    """Review pull request PULL_REQUEST_ID in REPOSITORY with codebase context.

    Example:
        reviewrag-review MyProject my-repo 42
        reviewrag-review MyProject my-repo 42 --post
    """
    configure_logging()
    service = ensure_context_service()
    try:
        pull_request = service.host.get_pull_request(project, repository, pull_request_id)
        if pull_request is None:
            click.echo(f"✗ Pull request {pull_request_id} not found", err=True)
            raise click.Abort()
        files = service.host.get_pull_request_files(project, repository, pull_request_id)
    except HostAPIError as e:
        click.echo(f"✗ Error fetching pull request: {e}", err=True)
        raise click.Abort()

    click.echo(f"🔍 PR #{pull_request.id}: {pull_request.title} ({len(files)} file(s))")
    if not skip_index:
        index_or_abort(service, project, repository, branch)

    orchestrator = ReviewOrchestrator(
        AgentRegistry.default(service.llm_service), service, llm_timeout=timeout
    )
    comments = asyncio.run(
        orchestrator.review_pull_request(pull_request, files, project, repository)
    )

    click.echo("")
    for i, comment in enumerate(comments, 1):
        click.echo(format_comment(i, comment.to_dict()))

    if post and comments:
        posted = 0
        for comment in comments:
            if service.host.post_comment(project, repository, pull_request_id, comment):
                comment.posted = True
                posted += 1
        click.echo(f"💬 Posted {posted} of {len(comments)} comment(s)")
        if posted < len(comments):
            click.echo("✗ Some comments could not be posted", err=True)

    click.echo(summarize_review(pull_request, files, comments))
