"""Embedding adapter over an LLM service."""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from reviewrag.constants import DEFAULT_EMBEDDING_TIMEOUT, DEFAULT_EMBEDDING_WORKERS
from reviewrag.errors import EmbeddingError
from reviewrag.llm.base import LLMService

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Turns text into a validated embedding vector.

    Wraps ``LLMService.generate_embeddings`` with a bounded wait and checks
    that every vector is non-empty, numeric, and of consistent length.

    Calls run on a pool of ``max_workers`` threads. A call that times out
    keeps its thread until the service returns, so at most ``max_workers``
    hung calls are outstanding and later calls queue behind them. Call
    ``close`` when done; embedding after that raises ``EmbeddingError``.

    Args:
        llm_service: Service providing ``generate_embeddings``
        model: Embedding model name, or None for the service default
        dimensions: Expected vector length. When None, the length of the
            first vector returned becomes the expected length.
        timeout: Seconds to wait for one embedding call
        max_workers: Threads running embedding calls
    """

    def __init__(
        self,
        llm_service: LLMService,
        model: str | None = None,
        dimensions: int | None = None,
        timeout: float = DEFAULT_EMBEDDING_TIMEOUT,
        max_workers: int = DEFAULT_EMBEDDING_WORKERS,
    ) -> None:
        self.llm_service = llm_service
        self.model = model
        self.dimensions = dimensions
        self.timeout = timeout
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="embed"
        )

    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            list[float]: The embedding vector

        Raises:
            EmbeddingError: If the client is closed, or the service fails,
                times out, or returns a malformed vector
        """
        try:
            future = self._executor.submit(
                self.llm_service.generate_embeddings, [text], self.model
            )
        except RuntimeError as e:
            raise EmbeddingError("Embedding client is closed") from e

        try:
            vectors = future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise EmbeddingError(f"Embedding timed out after {self.timeout}s") from e
        except Exception as e:
            raise EmbeddingError(f"Embedding service failed: {e}") from e

        if not vectors or not vectors[0]:
            raise EmbeddingError("Embedding service returned an empty vector")

        try:
            vector = [float(v) for v in vectors[0]]
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"Embedding contains non-numeric values: {e}") from e
        if not all(math.isfinite(v) for v in vector):
            raise EmbeddingError("Embedding contains non-finite values")

        with self._lock:
            if self.dimensions is None:
                self.dimensions = len(vector)
                logger.debug(f"Embedding dimensions set to {self.dimensions}")
        if len(vector) != self.dimensions:
            raise EmbeddingError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimensions}"
            )

        return vector

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
