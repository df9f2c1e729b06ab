"""Configuration for the host connection and the context engine."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from reviewrag.constants import (
    CONTENT_PREVIEW_LENGTH,
    DEFAULT_ADO_API_VERSION,
    DEFAULT_CHUNK_OVERLAP_LINES,
    DEFAULT_CHUNK_SIZE_LINES,
    DEFAULT_CONTEXT_MAX_RESULTS,
    DEFAULT_EMBEDDING_TIMEOUT,
    DEFAULT_EMBEDDING_WORKERS,
    DEFAULT_HOST_TIMEOUT,
    DEFAULT_INDEX_MAX_FILES,
    DEFAULT_INDEX_MIN_FILE_CHARS,
    DEFAULT_SIMILARITY_THRESHOLD,
    DEPENDENCY_SUMMARY_LINES,
)

# Load environment variables
load_dotenv()


class AzureDevOpsConfig:
    """Configuration class for Azure DevOps connection details."""

    @staticmethod
    def get_organization() -> str:
        """Get the Azure DevOps organization name.

        Returns:
            str: Organization name (default: empty string)
        """
        return os.getenv("ADO_ORGANIZATION", "")

    @staticmethod
    def get_personal_access_token() -> str:
        """Get the Azure DevOps personal access token.

        Returns:
            str: PAT (default: empty string)
        """
        return os.getenv("ADO_PAT", "")

    @staticmethod
    def get_base_url() -> str | None:
        """Get an explicit REST base URL, if one is configured.

        Returns:
            str | None: Base URL, or None to derive it from the organization
        """
        return os.getenv("ADO_BASE_URL") or None

    @staticmethod
    def get_api_version() -> str:
        return os.getenv("ADO_API_VERSION", DEFAULT_ADO_API_VERSION)

    @staticmethod
    def get_timeout() -> float:
        return float(os.getenv("HOST_TIMEOUT_SECONDS", str(DEFAULT_HOST_TIMEOUT)))

    @staticmethod
    def is_configured() -> bool:
        """Whether both organization and PAT are present."""
        return bool(
            AzureDevOpsConfig.get_organization()
            and AzureDevOpsConfig.get_personal_access_token()
        )


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


@dataclass(frozen=True)
class ContextSettings:
    """Policy knobs of the retrieval-augmented context engine.

    Attributes:
        chunk_size: Lines per chunk window
        chunk_overlap: Lines shared by consecutive windows
        similarity_threshold: Minimum cosine similarity (exclusive) for a match
        max_files: Files embedded per index run
        min_file_chars: Files shorter than this are not indexed
        context_max_results: Similar snippets included in a review context
        snippet_chars: Characters of a matched chunk shown to the model
        dependency_summary_lines: Leading lines kept from each dependency
        embedding_dimensions: Expected embedding length, or None to accept
            whatever the first embedding returns
        embedding_timeout: Seconds to wait for one embedding call
        embedding_workers: Threads running embedding calls. A timed-out call
            holds its thread until the service returns.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE_LINES
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP_LINES
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    max_files: int = DEFAULT_INDEX_MAX_FILES
    min_file_chars: int = DEFAULT_INDEX_MIN_FILE_CHARS
    context_max_results: int = DEFAULT_CONTEXT_MAX_RESULTS
    snippet_chars: int = CONTENT_PREVIEW_LENGTH
    dependency_summary_lines: int = DEPENDENCY_SUMMARY_LINES
    embedding_dimensions: int | None = None
    embedding_timeout: float = DEFAULT_EMBEDDING_TIMEOUT
    embedding_workers: int = DEFAULT_EMBEDDING_WORKERS

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, {self.chunk_size}), got {self.chunk_overlap}"
            )
        if not -1.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be in [-1, 1], got {self.similarity_threshold}"
            )
        if self.max_files <= 0:
            raise ValueError(f"max_files must be positive, got {self.max_files}")
        if self.embedding_dimensions is not None and self.embedding_dimensions <= 0:
            raise ValueError(
                f"embedding_dimensions must be positive, got {self.embedding_dimensions}"
            )
        if self.embedding_workers <= 0:
            raise ValueError(
                f"embedding_workers must be positive, got {self.embedding_workers}"
            )

    @classmethod
    def from_env(cls) -> "ContextSettings":
        """Build settings from environment variables, falling back to defaults.

        Returns:
            ContextSettings: Validated settings

        Raises:
            ValueError: If a variable is not a number or a value is out of range
        """
        dimensions = os.getenv("EMBEDDING_DIMENSIONS")
        return cls(
            chunk_size=_env_int("CHUNK_SIZE_LINES", DEFAULT_CHUNK_SIZE_LINES),
            chunk_overlap=_env_int("CHUNK_OVERLAP_LINES", DEFAULT_CHUNK_OVERLAP_LINES),
            similarity_threshold=_env_float(
                "SIMILARITY_THRESHOLD", DEFAULT_SIMILARITY_THRESHOLD
            ),
            max_files=_env_int("INDEX_MAX_FILES", DEFAULT_INDEX_MAX_FILES),
            min_file_chars=_env_int("INDEX_MIN_FILE_CHARS", DEFAULT_INDEX_MIN_FILE_CHARS),
            context_max_results=_env_int(
                "CONTEXT_MAX_RESULTS", DEFAULT_CONTEXT_MAX_RESULTS
            ),
            snippet_chars=_env_int("CONTEXT_SNIPPET_CHARS", CONTENT_PREVIEW_LENGTH),
            dependency_summary_lines=_env_int(
                "DEPENDENCY_SUMMARY_LINES", DEPENDENCY_SUMMARY_LINES
            ),
            embedding_dimensions=int(dimensions) if dimensions else None,
            embedding_timeout=_env_float(
                "EMBEDDING_TIMEOUT_SECONDS", DEFAULT_EMBEDDING_TIMEOUT
            ),
            embedding_workers=_env_int("EMBEDDING_WORKERS", DEFAULT_EMBEDDING_WORKERS),
        )
