"""Latent semantic space construction.

Training text is accumulated per category as raw term counts. Compiling
turns those counts into a term-category matrix and reduces it with a
truncated singular value decomposition:

1. Local weight per cell: ``log(1 + tf)`` (or raw ``tf``).
2. Global weight per term: ``log(1 + C / df)`` where ``C`` is the number of
   trained categories and ``df`` the number of categories using the term.
3. Each category column is L2 normalized so large categories do not
   dominate the decomposition.
4. ``A = U S V^T``; the first ``k`` left singular vectors ``U_k`` form the
   projection from term space into the latent space.

A category centroid is its own column folded into the latent space
(``U_k^T a``); query text is folded in the same way and compared to the
centroids by cosine similarity.

The decomposition is deterministic: the vocabulary is sorted, categories
keep their insertion order, and every singular vector is sign-normalized
so that its largest component is positive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np

from .config import ClassifierConfig
from .errors import CompilationError, InvalidInputError
from .models import Category
from .registry import CategoryRegistry

logger = logging.getLogger(__name__)


def local_weights(values: np.ndarray, sublinear_tf: bool) -> np.ndarray:
    """Apply the local term-frequency weighting."""
    return np.log1p(values) if sublinear_tf else values


# ---------------------------------------------------------------------------
# Semantic Map
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class SemanticMap:
    """Compiled, read-only mapping from term space to latent space.

    Attributes:
        vocabulary: Known terms, sorted; row order of ``projection``.
        global_weights: Per-term global weight, aligned with ``vocabulary``.
        projection: ``U_k`` matrix of shape (len(vocabulary), dimensions).
        singular_values: The ``k`` singular values kept.
        sublinear_tf: Whether query counts are log-scaled like training.
    """

    vocabulary: tuple[str, ...]
    global_weights: np.ndarray = field(repr=False)
    projection: np.ndarray = field(repr=False)
    singular_values: np.ndarray = field(repr=False)
    sublinear_tf: bool = True
    _index: dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.projection.ndim != 2 or self.projection.shape[0] != len(self.vocabulary):
            raise ValueError(
                f"projection shape {self.projection.shape} does not match "
                f"vocabulary size {len(self.vocabulary)}"
            )
        if self.global_weights.shape != (len(self.vocabulary),):
            raise ValueError("global_weights must have one entry per vocabulary term")
        if self.singular_values.shape != (self.projection.shape[1],):
            raise ValueError("singular_values must have one entry per dimension")
        for array in (self.global_weights, self.projection, self.singular_values):
            array.setflags(write=False)
        object.__setattr__(self, "_index", {t: i for i, t in enumerate(self.vocabulary)})

    @property
    def dimensions(self) -> int:
        return int(self.projection.shape[1])

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    def __contains__(self, term: object) -> bool:
        return term in self._index

    def weight_vector(self, vector: Mapping[str, float]) -> np.ndarray:
        """Weighted term-space column for a term vector; unknown terms are dropped."""
        column = np.zeros(len(self.vocabulary), dtype=np.float64)
        for term, weight in vector.items():
            idx = self._index.get(term)
            if idx is not None and weight > 0:
                column[idx] += weight
        return local_weights(column, self.sublinear_tf) * self.global_weights

    def project(self, vector: Mapping[str, float]) -> np.ndarray:
        """Fold a term vector into the latent space."""
        return self.projection.T @ self.weight_vector(vector)

    def to_dict(self) -> dict:
        return {
            "vocabulary": list(self.vocabulary),
            "global_weights": self.global_weights.tolist(),
            "projection": self.projection.tolist(),
            "singular_values": self.singular_values.tolist(),
            "sublinear_tf": self.sublinear_tf,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SemanticMap":
        vocabulary = tuple(data["vocabulary"])
        projection = np.asarray(data["projection"], dtype=np.float64)
        if projection.size == 0:
            projection = projection.reshape(len(vocabulary), 0)
        return cls(
            vocabulary=vocabulary,
            global_weights=np.asarray(data["global_weights"], dtype=np.float64),
            projection=projection,
            singular_values=np.asarray(data["singular_values"], dtype=np.float64),
            sublinear_tf=bool(data.get("sublinear_tf", True)),
        )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class SemanticSpaceBuilder:
    """Accumulates per-category term statistics and compiles semantic maps.

    Args:
        registry: Categories whose statistics are accumulated and compiled.
        config: Engine configuration (dimensions, weighting).
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        config: Optional[ClassifierConfig] = None,
    ) -> None:
        self._registry = registry
        self._config = config or ClassifierConfig()

    def accumulate(self, category_name: str, vector: Mapping[str, float]) -> None:
        """Add one training document's term vector to a category.

        Raises:
            NoSuchCategoryError: If the category does not exist.
            InvalidInputError: If a weight is negative.
        """
        category = self._registry.get(category_name)
        negative = [term for term, weight in vector.items() if weight < 0]
        if negative:
            raise InvalidInputError(f"Negative term weights: {negative[:5]}")

        for term, weight in vector.items():
            if weight > 0:
                category.term_counts[term] += float(weight)
        category.document_count += 1
        logger.debug(
            "Accumulated %d terms into %r (%d documents)",
            len(vector), category_name, category.document_count,
        )

    def compile(self) -> SemanticMap:
        """Build a semantic map from all accumulated statistics.

        On success every category's centroid is replaced; categories with
        no training data get a zero centroid.

        Raises:
            CompilationError: If the corpus has no terms, or fewer than two
                categories have training data.
        """
        categories = list(self._registry)
        trained = [c for c in categories if c.is_trained]
        if not trained:
            raise CompilationError("Cannot compile: the training corpus has no terms")
        if len(trained) < 2:
            raise CompilationError(
                f"Cannot compile: at least two categories need training data, "
                f"only {trained[0].name!r} has any"
            )

        vocabulary = sorted({t for c in trained for t, w in c.term_counts.items() if w > 0})
        index = {term: i for i, term in enumerate(vocabulary)}

        counts = np.zeros((len(vocabulary), len(trained)), dtype=np.float64)
        for col, category in enumerate(trained):
            for term, weight in category.term_counts.items():
                if weight > 0:
                    counts[index[term], col] = weight

        doc_freq = np.count_nonzero(counts, axis=1)
        global_weights = np.log1p(len(trained) / doc_freq)

        matrix = local_weights(counts, self._config.sublinear_tf) * global_weights[:, None]
        matrix /= np.linalg.norm(matrix, axis=0)

        u, s, _ = np.linalg.svd(matrix, full_matrices=False)
        rank = int(np.count_nonzero(s > s[0] * self._config.min_singular_value))
        k = max(1, min(self._config.dimensions, rank))
        u = u[:, :k]
        s = s[:k]

        pivots = np.argmax(np.abs(u), axis=0)
        signs = np.sign(u[pivots, np.arange(k)])
        signs[signs == 0] = 1.0
        u = u * signs

        semantic_map = SemanticMap(
            vocabulary=tuple(vocabulary),
            global_weights=global_weights,
            projection=np.ascontiguousarray(u),
            singular_values=s.copy(),
            sublinear_tf=self._config.sublinear_tf,
        )

        centroids = u.T @ matrix
        trained_columns = {c.name: col for col, c in enumerate(trained)}
        for category in categories:
            col = trained_columns.get(category.name)
            if col is None:
                category.centroid = np.zeros(k, dtype=np.float64)
            else:
                category.centroid = centroids[:, col].copy()

        logger.info(
            "Compiled semantic map: %d terms, %d trained categories, %d dimensions",
            len(vocabulary), len(trained), k,
        )
        return semantic_map

    @staticmethod
    def clear_centroids(categories: list[Category]) -> None:
        for category in categories:
            category.centroid = None
