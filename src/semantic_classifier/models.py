"""Data models for the semantic classifier."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Callable, Iterator, Optional

import numpy as np


class Mode(str, Enum):
    """Classifier phase: accumulating training data or answering queries."""

    TRAINING = "training"
    EVALUATION = "evaluation"


class TextOptions(IntFlag):
    """Tokenization flags accepted by training and evaluation calls."""

    NONE = 0
    PRESERVE_CASE = 1
    PRESERVE_ACRONYMS = 2
    APPLY_SPAM_HEURISTICS = 4


@dataclass
class Category:
    """A named category and its accumulated training statistics.

    Attributes:
        name: Unique category name.
        document_count: Number of training documents added.
        term_counts: Summed term weights over all training documents.
        centroid: Latent-space vector assigned by compilation, or None
            while the category has not been compiled.
    """

    name: str
    document_count: int = 0
    term_counts: Counter = field(default_factory=Counter, repr=False)
    centroid: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def term_mass(self) -> float:
        """Total weight of all accumulated terms."""
        return float(sum(self.term_counts.values()))

    @property
    def is_trained(self) -> bool:
        return self.term_mass > 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "document_count": self.document_count,
            "term_counts": dict(self.term_counts),
            "centroid": self.centroid.tolist() if self.centroid is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        centroid = data.get("centroid")
        return cls(
            name=data["name"],
            document_count=int(data.get("document_count", 0)),
            term_counts=Counter({t: float(w) for t, w in data.get("term_counts", {}).items()}),
            centroid=np.asarray(centroid, dtype=np.float64) if centroid is not None else None,
        )


class ClassifierResults:
    """Ranked (category name, score) pairs, best match first.

    Index lookups return ``None`` instead of raising when the index is
    out of range, so callers can probe without bounds checks::

        results = classifier.get_results("goal score", max_results=3)
        results.name_at(0)    # "Sports"
        results.score_at(7)   # None

        for name, score in results:
            print(name, score)
    """

    def __init__(self, ranked: Optional[list[tuple[str, float]]] = None) -> None:
        self._ranked: list[tuple[str, float]] = list(ranked or [])

    def __len__(self) -> int:
        return len(self._ranked)

    def __iter__(self) -> Iterator[tuple[str, float]]:
        return iter(self._ranked)

    def __bool__(self) -> bool:
        return bool(self._ranked)

    def __repr__(self) -> str:
        return f"ClassifierResults({self._ranked!r})"

    def count(self) -> int:
        """Return the number of results."""
        return len(self._ranked)

    def name_at(self, index: int) -> Optional[str]:
        """Category name at ``index``, or None if the index is not valid."""
        if 0 <= index < len(self._ranked):
            return self._ranked[index][0]
        return None

    def score_at(self, index: int) -> Optional[float]:
        """Score at ``index``, or None if the index is not valid."""
        if 0 <= index < len(self._ranked):
            return self._ranked[index][1]
        return None

    @property
    def top(self) -> Optional[tuple[str, float]]:
        """Best (name, score) pair, or None when there are no results."""
        return self._ranked[0] if self._ranked else None

    def enumerate_results(self, visitor: Callable[[str, float], bool]) -> None:
        """Call ``visitor(name, score)`` for each result in ranked order.

        The visitor returns True to stop the enumeration early.
        """
        for name, score in self._ranked:
            if visitor(name, score):
                break

    def to_list(self) -> list[tuple[str, float]]:
        return list(self._ranked)

    def to_dict(self) -> dict:
        return {
            "count": len(self._ranked),
            "results": [
                {"rank": i, "category": name, "score": round(score, 6)}
                for i, (name, score) in enumerate(self._ranked, 1)
            ],
        }
