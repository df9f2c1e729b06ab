"""Derive a similarity-search query from a changed file."""

from pathlib import PurePosixPath

from reviewrag.constants import QUERY_MAX_DIFF_LINES, QUERY_MAX_LENGTH, QUERY_MIN_LINE_LENGTH
from reviewrag.models import PullRequestFile


def added_lines(unified_diff: str) -> list[str]:
    """Return the added lines of a unified diff, without the leading ``+``."""
    return [
        line[1:]
        for line in unified_diff.split("\n")
        if line.startswith("+") and not line.startswith("+++")
    ]


def build_query(
    file: PullRequestFile,
    max_lines: int = QUERY_MAX_DIFF_LINES,
    min_line_length: int = QUERY_MIN_LINE_LENGTH,
    max_length: int = QUERY_MAX_LENGTH,
) -> str:
    """Build a search query from a file's added lines and its name.

    The first ``max_lines`` added lines that are at least ``min_line_length``
    characters after trimming are joined with spaces, followed by
    ``file <stem>``. A file whose diff adds nothing still yields the
    filename fragment.

    Returns:
        str: Query of at most ``max_length`` characters, empty only when
        there are no qualifying lines and no filename
    """
    qualifying = []
    for line in added_lines(file.unified_diff or ""):
        text = line.strip()
        if len(text) >= min_line_length:
            qualifying.append(text)
            if len(qualifying) >= max_lines:
                break

    parts = qualifying
    stem = PurePosixPath(file.path).stem if file.path else ""
    if stem:
        parts = [*qualifying, f"file {stem}"]

    return " ".join(parts)[:max_length]
