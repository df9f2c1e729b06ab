"""Build a repository's chunk index from the host."""

import logging
import threading
import time

from reviewrag.config import ContextSettings
from reviewrag.constants import DEFAULT_INDEX_BRANCH, SKIP_PATTERNS
from reviewrag.context.chunker import chunk_file
from reviewrag.context.embeddings import EmbeddingClient
from reviewrag.context.store import IndexStore
from reviewrag.errors import EmbeddingError
from reviewrag.host.base import HostClient
from reviewrag.models import CodeChunk

logger = logging.getLogger(__name__)


def should_skip_file(path: str) -> bool:
    """Whether a path names a binary, vendored, generated or lock file.

    Matching is a case-insensitive substring test against ``SKIP_PATTERNS``.
    """
    lowered = path.lower()
    return any(pattern in lowered for pattern in SKIP_PATTERNS)


class RepositoryIndexer:
    """Lists, filters, chunks and embeds a repository into an ``IndexStore``."""

    def __init__(
        self,
        host: HostClient,
        embedder: EmbeddingClient,
        store: IndexStore,
        settings: ContextSettings | None = None,
    ) -> None:
        self.host = host
        self.embedder = embedder
        self.store = store
        self.settings = settings or ContextSettings()
        self._in_flight: set[str] = set()
        self._in_flight_lock = threading.Lock()

    def is_indexing(self, repository_id: str) -> bool:
        """Whether an index run for the repository is currently in progress."""
        with self._in_flight_lock:
            return repository_id in self._in_flight

    def index_repository(
        self, project: str, repository_id: str, branch: str = DEFAULT_INDEX_BRANCH
    ) -> int:
        """Index a repository, replacing any previous index for it.

        Failures on a single file or chunk are logged and skipped. When the
        listing fails or is empty the existing index is left untouched. A call
        made while another run for the same repository is in progress returns
        the current chunk count without touching the host.

        Args:
            project: Host project name
            repository_id: Host repository identifier
            branch: Branch to read files from

        Returns:
            int: Number of chunks embedded and stored
        """
        with self._in_flight_lock:
            if repository_id in self._in_flight:
                logger.info(f"⏳ Indexing already in progress for {repository_id}; skipping")
                return self.store.chunk_count(repository_id)
            self._in_flight.add(repository_id)

        try:
            return self._index(project, repository_id, branch)
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(repository_id)

    def _index(self, project: str, repository_id: str, branch: str) -> int:
        logger.info(f"📦 Indexing repository {repository_id} ({project}) at {branch}")
        started = time.monotonic()

        try:
            files = self.host.list_files(project, repository_id, branch)
        except Exception as e:
            logger.error(f"❌ Failed to list files for {repository_id}: {e}", exc_info=True)
            return 0

        if not files:
            logger.warning(f"⚠️ No files found in repository {repository_id}")
            return 0

        candidates = [path for path in files if not should_skip_file(path)]
        logger.info(
            f"🔍 {len(candidates)} of {len(files)} files eligible for indexing "
            f"({len(files) - len(candidates)} skipped by pattern)"
        )
        if len(candidates) > self.settings.max_files:
            logger.warning(
                f"⚠️ Indexing only the first {self.settings.max_files} files; "
                f"{len(candidates) - self.settings.max_files} eligible files not indexed"
            )
            candidates = candidates[: self.settings.max_files]

        chunks: list[CodeChunk] = []
        for path in candidates:
            chunks.extend(self._index_file(project, repository_id, path, branch))

        if not chunks:
            logger.warning(f"⚠️ No chunks embedded for {repository_id}; index is now empty")

        index = self.store.replace(repository_id, chunks, branch=branch)
        elapsed = time.monotonic() - started
        logger.info(
            f"✅ Indexed {len(index.chunks)} chunks for {repository_id} "
            f"(v{index.version}, {elapsed:.1f}s)"
        )
        return len(index.chunks)

    def _index_file(
        self, project: str, repository_id: str, path: str, branch: str
    ) -> list[CodeChunk]:
        try:
            content = self.host.get_file_content(project, repository_id, path, branch)
        except Exception as e:
            logger.warning(f"⚠️ Failed to fetch {path}: {e}")
            return []

        if not content or len(content) < self.settings.min_file_chars:
            logger.debug(f"Skipping small or empty file {path}")
            return []

        embedded: list[CodeChunk] = []
        for chunk in chunk_file(
            content, path, self.settings.chunk_size, self.settings.chunk_overlap
        ):
            try:
                vector = self.embedder.embed(chunk.content)
            except EmbeddingError as e:
                logger.warning(f"⚠️ Failed to embed {chunk.location_label}: {e}")
                continue
            embedded.append(chunk.with_embedding(vector))
            logger.debug(f"Embedded {chunk.location_label}")

        return embedded
