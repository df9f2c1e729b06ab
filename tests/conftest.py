"""Pytest configuration and shared fixtures for the test suite."""

import hashlib
import re

import pytest
import requests

from reviewrag.config import ContextSettings
from reviewrag.context.service import CodebaseContextService
from reviewrag.models import PullRequest, PullRequestFile

FAKE_DIMENSIONS = 256


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def fake_embedding(text: str, dimensions: int = FAKE_DIMENSIONS) -> list[float]:
    """Bag-of-tokens vector: each lower-cased word token counts into a hashed bucket.

    Identical text always gives an identical vector, and texts sharing most
    of their tokens score close to 1.0.
    """
    vector = [0.0] * dimensions
    for token in re.findall(r"\w+", text.lower()):
        bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % dimensions
        vector[bucket] += 1.0
    return vector


class FakeLLMService:
    """LLMService stand-in with deterministic embeddings and canned responses."""

    def __init__(self, response: str = "[]", dimensions: int = FAKE_DIMENSIONS):
        self.response = response
        self.dimensions = dimensions
        self.embedded_texts: list[str] = []
        self.prompts: list[list[dict]] = []
        self.fail_on: set[str] = set()

    async def generate_response(self, messages: list[dict]) -> str:
        self.prompts.append(messages)
        return self.response

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        vectors = []
        for text in texts:
            if any(marker in text for marker in self.fail_on):
                raise RuntimeError("embedding backend unavailable")
            self.embedded_texts.append(text)
            vectors.append(fake_embedding(text, self.dimensions))
        return vectors


class FakeHost:
    """In-memory HostClient keyed by repository id, then path."""

    def __init__(self, repositories: dict[str, dict[str, str]] | None = None):
        self.repositories = repositories or {}
        self.pull_requests: dict[int, PullRequest] = {}
        self.pull_request_files: dict[int, list[PullRequestFile]] = {}
        self.posted = []
        self.fetches: list[tuple[str, str]] = []
        self.failing_paths: set[str] = set()
        self.list_error: Exception | None = None

    def list_files(self, project, repository_id, branch="main"):
        if self.list_error:
            raise self.list_error
        return list(self.repositories.get(repository_id, {}))

    def get_file_content(self, project, repository_id, path, ref):
        self.fetches.append((path, ref))
        if path in self.failing_paths:
            raise ConnectionError(f"timeout fetching {path}")
        return self.repositories.get(repository_id, {}).get(path, "")

    def get_pull_request(self, project, repository, pull_request_id):
        return self.pull_requests.get(pull_request_id)

    def get_active_pull_requests(self, project, repository):
        return list(self.pull_requests.values())

    def get_pull_request_files(self, project, repository, pull_request_id):
        return self.pull_request_files.get(pull_request_id, [])

    def post_comment(self, project, repository, pull_request_id, comment):
        self.posted.append((pull_request_id, comment))
        return True


def billing_lines() -> list[str]:
    """150 lines: an invoicing block (1-100) followed by a shipping block (101-150)."""
    return ["invoice_total = invoice_total + line_amount"] * 100 + [
        "shipping_cost = shipping_cost * carrier_rate"
    ] * 50


@pytest.fixture
def fake_llm():
    return FakeLLMService()


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def settings():
    return ContextSettings()


@pytest.fixture
def make_context_service(fake_llm):
    """Factory fixture building a CodebaseContextService over fakes."""

    def _make(host, settings: ContextSettings | None = None, llm=None):
        return CodebaseContextService(
            host, llm or fake_llm, settings=settings or ContextSettings()
        )

    return _make


@pytest.fixture
def make_file():
    """Factory fixture creating a PullRequestFile from added lines."""

    def _make(
        path: str = "/src/billing.py",
        added: list[str] | None = None,
        content: str | None = None,
        change_type: str = "edit",
    ) -> PullRequestFile:
        added = added or []
        diff_lines = [f"--- a{path}", f"+++ b{path}", f"@@ -1,0 +1,{len(added)} @@"]
        diff_lines += [f"+{line}" for line in added]
        return PullRequestFile(
            path=path,
            change_type=change_type,
            current_content=content if content is not None else "\n".join(added),
            unified_diff="\n".join(diff_lines),
        )

    return _make


@pytest.fixture
def pull_request():
    return PullRequest(
        id=42,
        title="Apply tax to invoices",
        description="Adds tax calculation to invoice totals",
        source_branch="refs/heads/feature/tax",
        target_branch="refs/heads/develop",
        status="active",
    )


@pytest.fixture
def ollama_service():
    """Provide OllamaService instance, skip if Ollama not available.

    Raises:
        pytest.skip: If Ollama server is not running
    """
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")

    from reviewrag.llm import OllamaService

    return OllamaService(host="http://localhost:11434", model="llama3")


@pytest.fixture
def billing_content() -> str:
    return "\n".join(billing_lines())
