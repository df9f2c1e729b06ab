"""Guess and fetch the files a source file imports."""

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from reviewrag.constants import (
    DEFAULT_INDEX_BRANCH,
    DEPENDENCY_MAX_FETCH,
    DEPENDENCY_MAX_REFERENCES,
    DEPENDENCY_SUMMARY_LINES,
)
from reviewrag.host.base import HostClient
from reviewrag.models import DependencyReference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportRule:
    """How one language names its imports and where they live.

    ``root_names`` are names that refer to a module root rather than a file,
    such as a bare ``crate`` left over from ``use crate::{a, b};``.
    """

    language: str
    pattern: re.Pattern
    separator: str
    prefix: str
    extension: str
    root_names: tuple[str, ...] = ()

    def to_path(self, name: str) -> str:
        return self.prefix + name.replace(self.separator, "/") + self.extension


IMPORT_RULES = {
    ".cs": ImportRule(
        language="csharp",
        pattern=re.compile(r"^\s*using\s+([A-Za-z0-9_.]+)\s*;", re.MULTILINE),
        separator=".",
        prefix="/",
        extension=".cs",
    ),
    ".py": ImportRule(
        language="python",
        pattern=re.compile(r"^\s*(?:from|import)\s+([A-Za-z0-9_.]+)", re.MULTILINE),
        separator=".",
        prefix="/",
        extension=".py",
    ),
    ".rs": ImportRule(
        language="rust",
        pattern=re.compile(r"^\s*use\s+(?:crate::)?([A-Za-z0-9_:]+)", re.MULTILINE),
        separator="::",
        prefix="/src/",
        extension=".rs",
        root_names=("crate", "self", "super"),
    ),
}


def resolve_dependencies(
    content: str, file_path: str, limit: int = DEPENDENCY_MAX_REFERENCES
) -> list[DependencyReference]:
    """Guess repository paths from a file's import statements.

    Args:
        content: Source text to scan
        file_path: Path of the file, used to pick the import rule
        limit: Maximum number of references

    Returns:
        list[DependencyReference]: De-duplicated guesses in first-seen order;
        empty for languages without an import rule
    """
    rule = IMPORT_RULES.get(PurePosixPath(file_path).suffix.lower())
    if rule is None or not content:
        return []

    references: list[DependencyReference] = []
    seen: set[str] = set()
    for match in rule.pattern.finditer(content):
        name = match.group(1).strip(rule.separator[0])
        if not name or name in rule.root_names:
            continue
        path = rule.to_path(name)
        if path in seen:
            continue
        seen.add(path)
        references.append(DependencyReference(path=path, source_statement=name, language=rule.language))
        if len(references) >= limit:
            break

    return references


def summarize_content(content: str, max_lines: int = DEPENDENCY_SUMMARY_LINES) -> str:
    """Keep the first ``max_lines`` lines of a file."""
    return "\n".join(content.split("\n")[:max_lines])


class DependencyResolver:
    """Fetches guessed dependencies from the host and renders a summary block."""

    def __init__(
        self,
        host: HostClient,
        summary_lines: int = DEPENDENCY_SUMMARY_LINES,
        max_fetch: int = DEPENDENCY_MAX_FETCH,
    ) -> None:
        self.host = host
        self.summary_lines = summary_lines
        self.max_fetch = max_fetch

    def fetch_dependency_context(
        self,
        references: list[DependencyReference],
        project: str,
        repository_id: str,
        ref: str = DEFAULT_INDEX_BRANCH,
    ) -> str:
        """Render the first lines of each resolvable dependency.

        Only the first ``max_fetch`` references are tried. Fetch failures and
        empty files are skipped.

        Returns:
            str: Markdown section, or "" when nothing could be fetched
        """
        sections = []
        for reference in references[: self.max_fetch]:
            try:
                content = self.host.get_file_content(project, repository_id, reference.path, ref)
            except Exception as e:
                logger.warning(f"⚠️ Failed to fetch dependency {reference.path}: {e}")
                continue
            if not content:
                logger.debug(f"Dependency {reference.path} not found")
                continue
            sections.append(
                f"### {reference.path}\n```\n{summarize_content(content, self.summary_lines)}\n```\n"
            )

        if not sections:
            return ""
        return "## Related Files (Dependencies)\n\n" + "\n".join(sections)
