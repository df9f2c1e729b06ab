"""Application-wide constants and defaults for reviewrag.

This module provides a single source of truth for configuration defaults,
policy knobs of the context engine, and other constants used throughout
the application.
"""

import os

# =============================================================================
# Chunking
# =============================================================================
DEFAULT_CHUNK_SIZE_LINES = 100  # Lines per chunk window
DEFAULT_CHUNK_OVERLAP_LINES = 10  # Lines shared by consecutive windows

# =============================================================================
# Repository Indexing
# =============================================================================
DEFAULT_INDEX_MAX_FILES = 50  # Files embedded per index run (cost bound)
DEFAULT_INDEX_MIN_FILE_CHARS = 50  # Smaller files carry too little signal
DEFAULT_INDEX_BRANCH = "main"
DEFAULT_INDEX_WORKERS = 2  # Background index jobs running at once
DEFAULT_EMBEDDING_WORKERS = 4  # Embedding calls in flight at once

SKIP_PATTERNS = (
    # Binary, image and archive files
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".ico",
    ".svg",
    ".pdf",
    ".zip",
    ".tar",
    ".gz",
    ".7z",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".pdb",
    ".woff",
    ".woff2",
    ".ttf",
    # Build output and vendored directories
    "node_modules/",
    "bin/",
    "obj/",
    ".git/",
    "packages/",
    # Lockfiles
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "cargo.lock",
    "poetry.lock",
    # Minified assets
    ".min.js",
    ".min.css",
    # Generated code
    ".generated.",
    ".designer.",
    "assemblyinfo.cs",
)

# =============================================================================
# Query Building
# =============================================================================
QUERY_MAX_DIFF_LINES = 10  # Added lines taken from the diff
QUERY_MIN_LINE_LENGTH = 6  # Shorter added lines are noise
QUERY_MAX_LENGTH = 1000  # Characters

# =============================================================================
# Retrieval
# =============================================================================
DEFAULT_SIMILARITY_THRESHOLD = 0.7  # Minimum cosine similarity for a match
DEFAULT_TOP_K = 5  # Default number of results for similarity search
DEFAULT_CONTEXT_MAX_RESULTS = 3  # Similar snippets included in review context
CONTENT_PREVIEW_LENGTH = 500  # Characters of a matched chunk shown to the model

# =============================================================================
# Dependency Resolution
# =============================================================================
DEPENDENCY_MAX_REFERENCES = 5
DEPENDENCY_MAX_FETCH = 3
DEPENDENCY_SUMMARY_LINES = 20

# =============================================================================
# Timeouts (seconds)
# =============================================================================
DEFAULT_HOST_TIMEOUT = 30
DEFAULT_EMBEDDING_TIMEOUT = 30
DEFAULT_LLM_TIMEOUT = 120

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_ADO_API_VERSION = "7.1"

# =============================================================================
# Embedding Model Defaults
# =============================================================================
EMBEDDING_DEFAULTS = {
    "ollama": "nomic-embed-text",
    "gemini": "text-embedding-004",
}


def get_embedding_model(service: str | None = None) -> str:
    """Get the default embedding model for a given LLM service.

    Checks the EMBEDDING_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The LLM service name ("ollama" or "gemini").
                If None, uses LLM_SERVICE env var or defaults to "ollama".

    Returns:
        str: The embedding model name to use.
    """
    env_model = os.getenv("EMBEDDING_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("LLM_SERVICE", "ollama")

    return EMBEDDING_DEFAULTS.get(service, EMBEDDING_DEFAULTS["ollama"])
