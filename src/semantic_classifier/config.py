"""Engine configuration."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields


@dataclass
class ClassifierConfig:
    """Tuning parameters for a ``SemanticClassifier``.

    The configuration is stored alongside the model when the classifier
    is saved and restored on load.

    Args:
        dimensions: Maximum number of latent dimensions kept after the
            singular value decomposition. The effective number is also
            bounded by the rank of the term-category matrix.
        min_singular_value: Singular values below this fraction of the
            largest one are treated as zero and dropped.
        sublinear_tf: Weight terms by ``log(1 + tf)`` instead of raw
            frequency.
        min_token_length: Tokens shorter than this are discarded by the
            default tokenizer.
        default_max_results: Result count used when a query does not
            give one.
    """

    dimensions: int = 100
    min_singular_value: float = 1e-10
    sublinear_tf: bool = True
    min_token_length: int = 1
    default_max_results: int = 10

    def __post_init__(self) -> None:
        if self.dimensions < 1:
            raise ValueError("dimensions must be at least 1")
        if not 0.0 <= self.min_singular_value < 1.0:
            raise ValueError("min_singular_value must be between 0.0 and 1.0")
        if self.min_token_length < 1:
            raise ValueError("min_token_length must be at least 1")
        if self.default_max_results < 1:
            raise ValueError("default_max_results must be at least 1")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClassifierConfig":
        """Build a config from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
