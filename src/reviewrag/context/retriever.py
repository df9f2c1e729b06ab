"""Rank indexed chunks by similarity to a changed file."""

import logging

from reviewrag.constants import DEFAULT_SIMILARITY_THRESHOLD, DEFAULT_TOP_K
from reviewrag.context.embeddings import EmbeddingClient
from reviewrag.context.query import build_query
from reviewrag.context.similarity import cosine_similarity
from reviewrag.context.store import IndexStore
from reviewrag.errors import EmbeddingError
from reviewrag.models import PullRequestFile, RetrievalResult

logger = logging.getLogger(__name__)


class SimilarityRetriever:
    """Linear-scan cosine similarity search over one repository's index.

    Each call reads a single index version from the store and does not lock,
    so retrievals for different files may run in parallel.
    """

    def __init__(
        self,
        store: IndexStore,
        embedder: EmbeddingClient,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.threshold = threshold

    def retrieve(
        self, file: PullRequestFile, repository_id: str, max_results: int = DEFAULT_TOP_K
    ) -> list[RetrievalResult]:
        """Find the chunks most similar to a changed file.

        Args:
            file: Changed file whose diff and name form the query
            repository_id: Repository whose index is searched
            max_results: Maximum number of results

        Returns:
            list[RetrievalResult]: Results with similarity above the threshold,
            sorted by descending similarity with ties in index order
        """
        if max_results <= 0:
            return []

        index = self.store.get(repository_id)
        if index is None or not index.chunks:
            logger.debug(f"Repository {repository_id} is not indexed")
            return []

        query = build_query(file)
        if not query:
            return []

        try:
            query_vector = self.embedder.embed(query)
        except EmbeddingError as e:
            logger.warning(f"⚠️ Failed to embed query for {file.path}: {e}")
            return []

        if len(query_vector) != index.dimensions:
            logger.error(
                f"❌ Query embedding has {len(query_vector)} dimensions but index "
                f"{repository_id} has {index.dimensions}"
            )
            return []

        scored = [
            RetrievalResult(chunk=chunk, similarity=cosine_similarity(query_vector, chunk.embedding))
            for chunk in index.chunks
        ]
        matches = [result for result in scored if result.similarity > self.threshold]
        # sorted() is stable, so equal scores keep index order
        matches = sorted(matches, key=lambda result: result.similarity, reverse=True)

        if matches:
            logger.debug(
                f"🔍 {len(matches)} chunks above {self.threshold} for {file.path}; "
                f"best {matches[0].similarity:.2f}"
            )
        else:
            logger.debug(f"🔍 No chunks above {self.threshold} for {file.path}")
        return matches[:max_results]
