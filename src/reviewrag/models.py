"""Data models shared by the context engine, the host client and the reviewers."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


@dataclass(frozen=True)
class CodeChunk:
    """A contiguous line range of one repository file.

    Chunks are immutable; embedding a chunk produces a new instance through
    ``with_embedding``.

    Attributes:
        file_path: Repository-relative path of the source file
        start_line: First line of the window (1-based, inclusive)
        end_line: Last line of the window (1-based, inclusive)
        chunk_index: Position of the window within its file
        content: The window's lines joined with newlines
        embedding: Vector embedding of the content, empty until embedded
    """

    file_path: str
    start_line: int
    end_line: int
    chunk_index: int
    content: str
    embedding: tuple[float, ...] = ()

    @property
    def location_label(self) -> str:
        return f"{self.file_path}:L{self.start_line}-L{self.end_line}"

    def with_embedding(self, vector: list[float] | tuple[float, ...]) -> "CodeChunk":
        """Return a copy of this chunk carrying the given embedding."""
        return replace(self, embedding=tuple(float(v) for v in vector))


@dataclass(frozen=True)
class RepositoryIndex:
    """One immutable version of a repository's chunk index.

    Attributes:
        repository_id: Host identifier of the repository
        chunks: Embedded chunks, all with embeddings of length ``dimensions``
        dimensions: Embedding length shared by every chunk (0 when empty)
        version: Monotonic version number assigned by the owning store
        branch: Branch the files were read from
        indexed_at: When this version was built
    """

    repository_id: str
    chunks: tuple[CodeChunk, ...]
    dimensions: int
    version: int = 1
    branch: str = "main"
    indexed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.chunks)


@dataclass
class PullRequestUser:
    display_name: str = ""
    unique_name: str = ""


@dataclass
class PullRequest:
    """Metadata of a pull request on the host."""

    id: int
    title: str = ""
    description: str = ""
    source_branch: str = ""
    target_branch: str = ""
    status: str = ""
    created_by: PullRequestUser = field(default_factory=PullRequestUser)
    creation_date: datetime | None = None

    @property
    def target_branch_name(self) -> str:
        """Target branch without the ``refs/heads/`` prefix."""
        return self.target_branch.removeprefix("refs/heads/")

    @property
    def source_branch_name(self) -> str:
        return self.source_branch.removeprefix("refs/heads/")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "sourceBranch": self.source_branch,
            "targetBranch": self.target_branch,
            "status": self.status,
            "createdBy": {
                "displayName": self.created_by.display_name,
                "uniqueName": self.created_by.unique_name,
            },
            "creationDate": self.creation_date.isoformat() if self.creation_date else None,
        }


@dataclass
class PullRequestFile:
    """A file changed by a pull request.

    Attributes:
        path: Repository-relative path
        change_type: Host change type ("add", "edit", "delete", ...)
        current_content: Content at the source commit
        previous_content: Content at the target commit ("" for new files)
        unified_diff: Unified diff from previous to current content
    """

    path: str
    change_type: str = "edit"
    current_content: str = ""
    previous_content: str = ""
    unified_diff: str = ""

    @property
    def is_deleted(self) -> bool:
        return "delete" in self.change_type.lower()

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "changeType": self.change_type,
            "unifiedDiff": self.unified_diff,
        }


@dataclass(frozen=True)
class RetrievalResult:
    chunk: CodeChunk
    similarity: float


@dataclass(frozen=True)
class DependencyReference:
    """A repository path guessed from an import statement.

    Attributes:
        path: Guessed repository path (may not exist)
        source_statement: The module or namespace named by the statement
        language: Language whose import rule produced the guess
    """

    path: str
    source_statement: str
    language: str


@dataclass
class ReviewComment:
    """A review finding on one line of a changed file."""

    file_path: str
    line_number: int
    comment_text: str
    comment_type: str = "suggestion"
    severity: str = "low"
    posted: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filePath": self.file_path,
            "lineNumber": self.line_number,
            "commentText": self.comment_text,
            "commentType": self.comment_type,
            "severity": self.severity,
            "posted": self.posted,
        }
