"""Vector similarity helpers."""

import math
from collections.abc import Sequence


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Args:
        vec_a: First embedding vector
        vec_b: Second embedding vector

    Returns:
        float: Cosine similarity in [-1, 1], or 0.0 when either vector is
        empty, has zero magnitude, or the lengths differ
    """
    if not vec_a or not vec_b or len(vec_a) != len(vec_b):
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b))
    magnitude_a = math.sqrt(sum(a * a for a in vec_a))
    magnitude_b = math.sqrt(sum(b * b for b in vec_b))

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    # Clamp floating-point drift outside the valid range
    return max(-1.0, min(1.0, dot_product / (magnitude_a * magnitude_b)))
