"""Tests for repository indexing."""

import pytest

from reviewrag.config import ContextSettings
from reviewrag.context.embeddings import EmbeddingClient
from reviewrag.context.indexer import RepositoryIndexer, should_skip_file
from reviewrag.context.store import IndexStore

PY_SOURCE = "\n".join(f"def handler_{i}(request):\n    return respond(request, {i})" for i in range(30))


@pytest.fixture
def store():
    return IndexStore()


@pytest.fixture
def make_indexer(fake_host, fake_llm, store):
    def _make(settings: ContextSettings | None = None):
        return RepositoryIndexer(fake_host, EmbeddingClient(fake_llm), store, settings)

    return _make


class TestShouldSkipFile:
    """Tests for the file filter."""

    @pytest.mark.parametrize(
        "path",
        [
            "/assets/logo.PNG",
            "/docs/manual.pdf",
            "/web/node_modules/react/index.js",
            "/src/App/bin/Debug/App.dll",
            "/src/App/obj/project.assets.json",
            "/.git/config",
            "/packages/Newtonsoft.Json/lib.xml",
            "/package-lock.json",
            "/yarn.lock",
            "/Cargo.lock",
            "/static/site.min.js",
            "/static/site.min.css",
            "/src/Models/User.generated.cs",
            "/src/Forms/Main.Designer.cs",
            "/src/Properties/AssemblyInfo.cs",
        ],
    )
    def test_skipped(self, path):
        """Test binary, vendored, lock, minified and generated files are skipped."""
        assert should_skip_file(path) is True

    @pytest.mark.parametrize(
        "path", ["/src/billing.py", "/src/Services/UserService.cs", "/src/main.rs", "/README.md"]
    )
    def test_kept(self, path):
        """Test ordinary source files are kept."""
        assert should_skip_file(path) is False


class TestRepositoryIndexer:
    """Tests for RepositoryIndexer.index_repository."""

    def test_empty_listing_returns_zero(self, make_indexer, store):
        """Test a repository with no files indexes nothing without raising."""
        assert make_indexer().index_repository("Proj", "empty-repo") == 0
        assert store.get("empty-repo") is None

    def test_listing_failure_returns_zero(self, make_indexer, fake_host, store):
        """Test a failing listing leaves the store untouched."""
        fake_host.list_error = ConnectionError("host down")
        assert make_indexer().index_repository("Proj", "repo") == 0
        assert store.get("repo") is None

    def test_indexes_source_files(self, make_indexer, fake_host, store, billing_content):
        """Test eligible files are chunked, embedded and stored."""
        fake_host.repositories["repo"] = {
            "/src/billing.py": billing_content,
            "/src/handlers.py": PY_SOURCE,
            "/assets/logo.png": "binary" * 50,
            "/src/tiny.py": "x = 1",
            "/src/empty.py": "",
        }

        count = make_indexer().index_repository("Proj", "repo", "develop")

        index = store.get("repo")
        assert count == len(index.chunks) == 3
        paths = {chunk.file_path for chunk in index.chunks}
        assert paths == {"/src/billing.py", "/src/handlers.py"}
        assert index.branch == "develop"
        assert all(len(chunk.embedding) == index.dimensions for chunk in index.chunks)
        assert ("/assets/logo.png", "develop") not in fake_host.fetches

    def test_idempotent(self, make_indexer, fake_host, store, billing_content):
        """Test re-indexing replaces rather than appends."""
        fake_host.repositories["repo"] = {"/src/billing.py": billing_content}
        indexer = make_indexer()

        first = indexer.index_repository("Proj", "repo")
        first_version = store.get("repo").version
        second = indexer.index_repository("Proj", "repo")

        assert first == second == store.chunk_count("repo") == 2
        assert store.get("repo").version > first_version

    def test_fetch_failure_skips_file(self, make_indexer, fake_host, store, billing_content):
        """Test one failing file does not abort the run."""
        fake_host.repositories["repo"] = {
            "/src/billing.py": billing_content,
            "/src/handlers.py": PY_SOURCE,
        }
        fake_host.failing_paths.add("/src/handlers.py")

        assert make_indexer().index_repository("Proj", "repo") == 2
        assert {c.file_path for c in store.get("repo").chunks} == {"/src/billing.py"}

    def test_embedding_failure_skips_chunk(self, make_indexer, fake_host, fake_llm, store, billing_content):
        """Test a chunk whose embedding fails is skipped, others kept."""
        fake_host.repositories["repo"] = {"/src/billing.py": billing_content}
        fake_llm.fail_on.add("shipping_cost")

        assert make_indexer().index_repository("Proj", "repo") == 1
        assert store.get("repo").chunks[0].location_label == "/src/billing.py:L1-L100"

    def test_file_cap(self, make_indexer, fake_host, store):
        """Test at most max_files files are read per run."""
        fake_host.repositories["repo"] = {f"/src/mod_{i}.py": PY_SOURCE for i in range(5)}

        count = make_indexer(ContextSettings(max_files=2)).index_repository("Proj", "repo")

        assert count == 2
        assert len(fake_host.fetches) == 2

    def test_reindex_with_all_failures_empties_index(self, make_indexer, fake_host, fake_llm, store, billing_content):
        """Test a run that embeds nothing replaces the index with an empty one."""
        fake_host.repositories["repo"] = {"/src/billing.py": billing_content}
        indexer = make_indexer()
        indexer.index_repository("Proj", "repo")

        fake_llm.fail_on.add("invoice_total")
        assert indexer.index_repository("Proj", "repo") == 0
        assert store.is_indexed("repo") is False
