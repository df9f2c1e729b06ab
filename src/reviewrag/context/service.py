"""Facade over the context engine used by reviewers and front doors."""

import logging

from reviewrag.config import ContextSettings
from reviewrag.constants import DEFAULT_INDEX_BRANCH
from reviewrag.context.dependencies import DependencyResolver, resolve_dependencies
from reviewrag.context.embeddings import EmbeddingClient
from reviewrag.context.indexer import RepositoryIndexer
from reviewrag.context.retriever import SimilarityRetriever
from reviewrag.context.store import IndexStore
from reviewrag.host.base import HostClient
from reviewrag.llm.base import LLMService
from reviewrag.models import PullRequest, PullRequestFile

logger = logging.getLogger(__name__)


class CodebaseContextService:
    """Indexes repositories and assembles review context for changed files.

    One instance owns one ``IndexStore`` and is meant to live as long as the
    process. All methods are safe to call from several threads; indexing
    swaps in a new index version while retrievals keep reading the old one.

    Args:
        host: Source-control host client
        llm_service: Service providing embeddings
        store: Index store to use (a new empty store when None)
        settings: Engine settings (defaults when None)
        embedding_model: Embedding model name (service default when None)
    """

    def __init__(
        self,
        host: HostClient,
        llm_service: LLMService,
        store: IndexStore | None = None,
        settings: ContextSettings | None = None,
        embedding_model: str | None = None,
    ) -> None:
        self.host = host
        self.llm_service = llm_service
        self.settings = settings or ContextSettings()
        self.store = store if store is not None else IndexStore()
        self.embedder = EmbeddingClient(
            llm_service,
            model=embedding_model,
            dimensions=self.settings.embedding_dimensions,
            timeout=self.settings.embedding_timeout,
            max_workers=self.settings.embedding_workers,
        )
        self.indexer = RepositoryIndexer(host, self.embedder, self.store, self.settings)
        self.retriever = SimilarityRetriever(
            self.store, self.embedder, self.settings.similarity_threshold
        )
        self.dependencies = DependencyResolver(host, self.settings.dependency_summary_lines)

    def index_repository(
        self, project: str, repository_id: str, branch: str = DEFAULT_INDEX_BRANCH
    ) -> int:
        return self.indexer.index_repository(project, repository_id, branch)

    def is_indexed(self, repository_id: str) -> bool:
        return self.store.is_indexed(repository_id)

    def is_indexing(self, repository_id: str) -> bool:
        return self.indexer.is_indexing(repository_id)

    def chunk_count(self, repository_id: str) -> int:
        return self.store.chunk_count(repository_id)

    def clear_index(self, repository_id: str) -> bool:
        cleared = self.store.clear(repository_id)
        if cleared:
            logger.info(f"🗑️ Cleared index for {repository_id}")
        return cleared

    def close(self) -> None:
        """Release the embedding worker threads. Later embeddings fail."""
        self.embedder.close()

    def get_relevant_context(
        self, file: PullRequestFile, repository_id: str, max_results: int | None = None
    ) -> str:
        """Render the chunks most similar to a changed file.

        Args:
            file: Changed file
            repository_id: Repository to search
            max_results: Maximum snippets (settings default when None)

        Returns:
            str: "## Relevant Codebase Context" section, or "" when nothing matches
        """
        if max_results is None:
            max_results = self.settings.context_max_results
        results = self.retriever.retrieve(file, repository_id, max_results)
        if not results:
            return ""

        limit = self.settings.snippet_chars
        lines = ["## Relevant Codebase Context", ""]
        for result in results:
            content = result.chunk.content
            if len(content) > limit:
                content = content[:limit] + "..."
            lines.extend(
                [
                    f"### Similar code (relevance: {result.similarity:.2f})",
                    f"Location: {result.chunk.location_label}",
                    "```",
                    content,
                    "```",
                    "",
                ]
            )

        logger.info(f"🔍 Found {len(results)} relevant code snippets for {file.path}")
        return "\n".join(lines)

    def get_dependency_context(
        self,
        file: PullRequestFile,
        project: str,
        repository_id: str,
        ref: str = DEFAULT_INDEX_BRANCH,
    ) -> str:
        """Render summaries of the files a changed file appears to import."""
        references = resolve_dependencies(file.current_content, file.path)
        if not references:
            return ""
        logger.debug(f"Resolved {len(references)} dependencies for {file.path}")
        return self.dependencies.fetch_dependency_context(references, project, repository_id, ref)

    def build_review_context(
        self,
        file: PullRequestFile,
        pull_request: PullRequest,
        project: str,
        repository_id: str,
    ) -> str:
        """Assemble the full context handed to a reviewer for one file.

        Sections appear in a fixed order: the pull request header, similar
        code, then dependencies. Empty sections are left out. Any failure in
        retrieval or dependency fetching drops that section rather than
        raising, so the result always contains at least the header.

        Args:
            file: Changed file under review
            pull_request: Pull request the file belongs to
            project: Host project name
            repository_id: Repository whose index is searched

        Returns:
            str: Markdown context
        """
        header = ["# Pull Request Context", f"**Title:** {pull_request.title}"]
        if pull_request.description:
            header.append(f"**Description:** {pull_request.description}")
        sections = ["\n".join(header) + "\n"]

        try:
            semantic = self.get_relevant_context(
                file, repository_id, self.settings.context_max_results
            )
        except Exception as e:
            logger.error(f"❌ Error searching for relevant context: {e}", exc_info=True)
            semantic = ""
        if semantic:
            sections.append(semantic)

        ref = pull_request.target_branch_name or DEFAULT_INDEX_BRANCH
        try:
            dependency = self.get_dependency_context(file, project, repository_id, ref)
        except Exception as e:
            logger.error(f"❌ Error building dependency context: {e}", exc_info=True)
            dependency = ""
        if dependency:
            sections.append(dependency)

        return "\n".join(sections)
