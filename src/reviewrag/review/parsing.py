"""Parse review comments out of a model response."""

import json
import logging
from typing import Any

from reviewrag.models import ReviewComment

logger = logging.getLogger(__name__)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json (or bare ```) fence from a response."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[len("```json"):]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _lower_keys(item: dict[str, Any]) -> dict[str, Any]:
    return {str(key).lower(): value for key, value in item.items()}


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_review_comments(response: str, file_path: str) -> list[ReviewComment]:
    """Parse a JSON array of review findings.

    Each element may carry ``lineNumber``, ``severity``, ``type`` and
    ``comment`` in any letter case. Severity defaults to "low" and type to
    "suggestion". Elements without comment text are dropped.

    Args:
        response: Raw model output, optionally wrapped in a code fence
        file_path: File the comments belong to

    Returns:
        list[ReviewComment]: Parsed comments, empty if the response is not a
        JSON array
    """
    text = strip_code_fence(response or "")
    if not text:
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"❌ Error parsing review comments JSON for {file_path}: {e}")
        return []

    if not isinstance(data, list):
        logger.error(f"❌ Review response for {file_path} is not a JSON array")
        return []

    comments = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        item = _lower_keys(raw)
        comment_text = str(item.get("comment") or "").strip()
        if not comment_text:
            continue
        comments.append(
            ReviewComment(
                file_path=file_path,
                line_number=_as_int(item.get("linenumber")),
                comment_text=comment_text,
                comment_type=str(item.get("type") or "suggestion").lower(),
                severity=str(item.get("severity") or "low").lower(),
            )
        )
    return comments
