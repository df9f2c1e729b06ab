"""Tests for similarity retrieval."""

from unittest.mock import MagicMock

import pytest

from reviewrag.config import ContextSettings
from reviewrag.context.retriever import SimilarityRetriever
from reviewrag.context.store import IndexStore
from reviewrag.errors import EmbeddingError
from reviewrag.models import CodeChunk, PullRequestFile

VECTORS = [
    [1.0, 0.0, 0.0],
    [0.9, 0.1, 0.0],
    [0.9, 0.1, 0.0],
    [0.7, 0.7, 0.0],
    [0.0, 1.0, 0.0],
    [0.95, 0.0, 0.05],
]


@pytest.fixture
def store():
    store = IndexStore()
    chunks = [
        CodeChunk(
            file_path=f"/src/m{i}.py",
            start_line=1,
            end_line=10,
            chunk_index=0,
            content=f"chunk {i}",
        ).with_embedding(vector)
        for i, vector in enumerate(VECTORS)
    ]
    store.replace("repo", chunks)
    return store


@pytest.fixture
def embedder():
    embedder = MagicMock()
    embedder.embed.return_value = [1.0, 0.0, 0.0]
    return embedder


class TestSimilarityRetriever:
    """Tests for SimilarityRetriever.retrieve."""

    def test_unknown_repository(self, store, embedder, make_file):
        """Test an unindexed repository returns nothing without embedding."""
        retriever = SimilarityRetriever(store, embedder)
        assert retriever.retrieve(make_file(added=["something added"]), "unknown-repo", 5) == []
        embedder.embed.assert_not_called()

    def test_ranked_and_filtered(self, store, embedder, make_file):
        """Test results are above threshold and sorted descending, ties in index order."""
        results = SimilarityRetriever(store, embedder).retrieve(make_file(), "repo", 10)

        paths = [r.chunk.file_path for r in results]
        assert paths == ["/src/m0.py", "/src/m5.py", "/src/m1.py", "/src/m2.py", "/src/m3.py"]
        scores = [r.similarity for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(score > 0.7 for score in scores)

    def test_max_results_cap(self, store, embedder, make_file):
        """Test the number of results never exceeds max_results."""
        retriever = SimilarityRetriever(store, embedder)
        for max_results in range(0, 8):
            assert len(retriever.retrieve(make_file(), "repo", max_results)) <= max_results
        assert retriever.retrieve(make_file(), "repo", 0) == []

    def test_deterministic(self, store, embedder, make_file):
        """Test repeated calls give identical ordered results."""
        retriever = SimilarityRetriever(store, embedder)
        assert retriever.retrieve(make_file(), "repo", 5) == retriever.retrieve(make_file(), "repo", 5)

    def test_threshold_monotonic(self, store, embedder, make_file):
        """Test raising the threshold never increases the result count."""
        counts = [
            len(SimilarityRetriever(store, embedder, threshold).retrieve(make_file(), "repo", 10))
            for threshold in (-1.0, 0.0, 0.5, 0.7, 0.9, 0.99, 1.0)
        ]
        assert counts == sorted(counts, reverse=True)

    def test_embedding_failure_returns_empty(self, store, embedder, make_file):
        """Test a failing query embedding degrades to no results."""
        embedder.embed.side_effect = EmbeddingError("down")
        assert SimilarityRetriever(store, embedder).retrieve(make_file(), "repo", 5) == []

    def test_dimension_mismatch_returns_empty(self, store, embedder, make_file):
        """Test a query vector of the wrong length is rejected."""
        embedder.embed.return_value = [1.0, 0.0]
        assert SimilarityRetriever(store, embedder).retrieve(make_file(), "repo", 5) == []

    def test_empty_query_returns_empty(self, store, embedder):
        """Test a file without diff or name produces no query and no results."""
        assert SimilarityRetriever(store, embedder).retrieve(PullRequestFile(path=""), "repo", 5) == []
        embedder.embed.assert_not_called()


class TestExactMatchScenario:
    """End-to-end retrieval over a context service with deterministic embeddings."""

    def test_copied_lines_surface_their_chunk(
        self, fake_host, make_context_service, make_file, billing_content
    ):
        """Test lines copied from 60-70 retrieve the chunk containing them."""
        fake_host.repositories["repo"] = {"/src/billing.py": billing_content}
        service = make_context_service(fake_host)
        assert service.index_repository("Proj", "repo") == 2

        added = billing_content.split("\n")[59:70]
        file = make_file("/src/billing.py", added)
        results = service.retriever.retrieve(file, "repo", 5)

        assert results
        top = results[0]
        assert top.chunk.start_line <= 60 and top.chunk.end_line >= 70
        assert top.chunk.location_label == "/src/billing.py:L1-L100"
        assert top.similarity > 0.9

    def test_query_dimension_differs_from_index(
        self, fake_host, make_context_service, make_file, billing_content
    ):
        """Test an index built at another dimensionality is not scored."""
        fake_host.repositories["repo"] = {"/src/billing.py": billing_content}
        service = make_context_service(fake_host, ContextSettings())
        service.index_repository("Proj", "repo")
        service.embedder.embed = MagicMock(return_value=[1.0, 2.0])

        assert service.retriever.retrieve(make_file(added=["invoice_total = 0"]), "repo", 5) == []
