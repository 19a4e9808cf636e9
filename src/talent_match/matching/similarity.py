"""
Vector similarity helpers.
"""

from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two embedding vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        Similarity in [-1, 1]. Empty or zero-magnitude vectors give 0.0.

    Raises:
        ValueError: If the vectors have different lengths.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Embedding dimensions differ: {va.shape} vs {vb.shape}")

    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if va.size == 0 or norm == 0.0:
        return 0.0

    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def similarity_to_percentage(similarity: float) -> float:
    """Rescale a cosine similarity from [-1, 1] to a 0-100 percentage."""
    return max(0.0, min(100.0, (similarity + 1.0) * 50.0))
