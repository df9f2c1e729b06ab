"""In-memory store of repository indexes."""

import logging
import threading
from collections.abc import Iterable

from reviewrag.models import CodeChunk, RepositoryIndex

logger = logging.getLogger(__name__)


class IndexStore:
    """Holds the current index version of each repository.

    Each repository maps to an immutable ``RepositoryIndex``. Writers build a
    complete new version and swap it in under a lock, so a reader sees either
    the old or the new version, never a partial one. Reads do not lock.
    """

    def __init__(self) -> None:
        self._indexes: dict[str, RepositoryIndex] = {}
        self._lock = threading.Lock()
        self._version = 0

    def get(self, repository_id: str) -> RepositoryIndex | None:
        return self._indexes.get(repository_id)

    def replace(
        self, repository_id: str, chunks: Iterable[CodeChunk], branch: str = "main"
    ) -> RepositoryIndex:
        """Replace a repository's index with a new version built from chunks.

        Args:
            repository_id: Repository to replace
            chunks: Embedded chunks of the new version
            branch: Branch the chunks were read from

        Returns:
            RepositoryIndex: The version now visible to readers

        Raises:
            ValueError: If a chunk has no embedding or embeddings differ in length
        """
        chunk_tuple = tuple(chunks)
        dimensions = len(chunk_tuple[0].embedding) if chunk_tuple else 0
        for chunk in chunk_tuple:
            if not chunk.embedding:
                raise ValueError(f"Chunk {chunk.location_label} has no embedding")
            if len(chunk.embedding) != dimensions:
                raise ValueError(
                    f"Chunk {chunk.location_label} has {len(chunk.embedding)} dimensions, "
                    f"expected {dimensions}"
                )

        with self._lock:
            self._version += 1
            index = RepositoryIndex(
                repository_id=repository_id,
                chunks=chunk_tuple,
                dimensions=dimensions,
                version=self._version,
                branch=branch,
            )
            self._indexes[repository_id] = index

        logger.debug(
            f"Stored index v{index.version} for {repository_id}: {len(chunk_tuple)} chunks"
        )
        return index

    def clear(self, repository_id: str) -> bool:
        """Drop a repository's index. Returns True if one existed."""
        with self._lock:
            return self._indexes.pop(repository_id, None) is not None

    def clear_all(self) -> None:
        with self._lock:
            self._indexes.clear()

    def is_indexed(self, repository_id: str) -> bool:
        index = self._indexes.get(repository_id)
        return index is not None and len(index.chunks) > 0

    def chunk_count(self, repository_id: str) -> int:
        index = self._indexes.get(repository_id)
        return len(index.chunks) if index else 0

    def repositories(self) -> list[str]:
        return sorted(self._indexes)
