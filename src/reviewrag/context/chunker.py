"""Split file content into overlapping line windows."""

from reviewrag.constants import DEFAULT_CHUNK_OVERLAP_LINES, DEFAULT_CHUNK_SIZE_LINES
from reviewrag.models import CodeChunk


def chunk_file(
    content: str,
    file_path: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE_LINES,
    overlap: int = DEFAULT_CHUNK_OVERLAP_LINES,
) -> list[CodeChunk]:
    """Split a file into windows of ``chunk_size`` lines.

    Windows start every ``chunk_size - overlap`` lines until a start offset
    runs past the last line, so the final windows may be shorter than
    ``chunk_size`` and may lie inside the window before them. A file with
    fewer than ``chunk_size`` lines is a single chunk.

    Args:
        content: Full file text
        file_path: Repository path recorded on each chunk
        chunk_size: Lines per window
        overlap: Lines shared by consecutive windows

    Returns:
        list[CodeChunk]: Chunks in file order, without embeddings

    Raises:
        ValueError: If chunk_size is not positive or overlap is out of range
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not 0 <= overlap < chunk_size:
        raise ValueError(f"overlap must be in [0, {chunk_size}), got {overlap}")

    if not content:
        return []

    lines = content.split("\n")
    step = chunk_size - overlap
    chunks: list[CodeChunk] = []

    if len(lines) < chunk_size:
        return [
            CodeChunk(
                file_path=file_path,
                start_line=1,
                end_line=len(lines),
                chunk_index=0,
                content=content,
            )
        ]

    start = 0
    while start < len(lines):
        end = min(start + chunk_size, len(lines))
        chunks.append(
            CodeChunk(
                file_path=file_path,
                start_line=start + 1,
                end_line=end,
                chunk_index=len(chunks),
                content="\n".join(lines[start:end]),
            )
        )
        start += step

    return chunks
