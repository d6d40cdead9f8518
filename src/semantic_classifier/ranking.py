"""Similarity scoring and ranking of categories against a query vector."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .models import Category, ClassifierResults


def cosine_scores(query: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Cosine similarity between ``query`` and each row of ``centroids``.

    Zero-norm vectors score 0.0. Results are clipped to [-1.0, 1.0] to
    absorb floating-point overshoot.
    """
    query = np.asarray(query, dtype=np.float64)
    centroids = np.atleast_2d(np.asarray(centroids, dtype=np.float64))
    if centroids.size == 0:
        return np.zeros(centroids.shape[0], dtype=np.float64)

    norms = np.linalg.norm(centroids, axis=1) * np.linalg.norm(query)
    dots = centroids @ query
    scores = np.zeros_like(dots)
    np.divide(dots, norms, out=scores, where=norms > 0)
    return np.clip(scores, -1.0, 1.0)


def rank(
    query_vector: np.ndarray,
    categories: Iterable[Category],
    max_results: int,
) -> ClassifierResults:
    """Score every category against a latent query vector.

    Args:
        query_vector: Query folded into the latent space.
        categories: Compiled categories, in insertion order.
        max_results: Maximum number of results; ``<= 0`` gives none.

    Returns:
        ClassifierResults sorted by descending score. Equal scores keep
        category insertion order.
    """
    categories = list(categories)
    if max_results <= 0 or not categories:
        return ClassifierResults()

    dims = len(query_vector)
    centroids = np.vstack([
        c.centroid if c.centroid is not None else np.zeros(dims) for c in categories
    ])
    scores = cosine_scores(query_vector, centroids).astype(np.float32)

    # Stable sort on the negated score keeps insertion order for ties
    order = np.argsort(-scores, kind="stable")
    ranked = [(categories[i].name, float(scores[i])) for i in order[:max_results]]
    return ClassifierResults(ranked)
