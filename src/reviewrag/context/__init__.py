"""Retrieval-augmented context engine.

Indexes a repository into embedded line-window chunks and assembles review
context for changed files from similar chunks and imported files.

Usage:
    from reviewrag.context import CodebaseContextService

    service = CodebaseContextService(host, llm_service)
    service.index_repository("Project", "repo-id")
    context = service.build_review_context(file, pull_request, "Project", "repo-id")
"""

from reviewrag.context.chunker import chunk_file
from reviewrag.context.dependencies import DependencyResolver, resolve_dependencies
from reviewrag.context.embeddings import EmbeddingClient
from reviewrag.context.indexer import RepositoryIndexer, should_skip_file
from reviewrag.context.jobs import IndexJob, IndexJobTracker, JobStatus
from reviewrag.context.query import build_query
from reviewrag.context.retriever import SimilarityRetriever
from reviewrag.context.service import CodebaseContextService
from reviewrag.context.similarity import cosine_similarity
from reviewrag.context.store import IndexStore

__all__ = [
    "CodebaseContextService",
    "DependencyResolver",
    "EmbeddingClient",
    "IndexJob",
    "IndexJobTracker",
    "IndexStore",
    "JobStatus",
    "RepositoryIndexer",
    "SimilarityRetriever",
    "build_query",
    "chunk_file",
    "cosine_similarity",
    "resolve_dependencies",
    "should_skip_file",
]
