"""Classifier engine: mode state machine, training, evaluation and persistence.

``SemanticClassifier`` is the primary entry point. It is always in one of
two modes:

- ``Mode.TRAINING`` (initial): categories and training text may be added.
- ``Mode.EVALUATION``: text is scored against the compiled semantic map.

Training calls made in evaluation mode switch back to training and drop
the compiled map, so a stale model is never served. Evaluation calls made
in training mode compile the map first and then switch to evaluation;
later evaluation calls reuse the compiled map until training resumes.

All public operations run under one re-entrant lock, so a classifier can
be shared between threads, but each call is serialized.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

import numpy as np

from .config import ClassifierConfig
from .errors import (
    BadPathError,
    ClassifierError,
    CompilationError,
    InvalidModeError,
    ModeTransitionError,
    WriteError,
)
from .models import Category, ClassifierResults, Mode, TextOptions
from .ranking import rank
from .registry import CategoryRegistry
from .semantic_map import SemanticMap, SemanticSpaceBuilder
from .tokenizer import DefaultTokenizer, TextInput, Tokenizer

logger = logging.getLogger(__name__)

FILE_FORMAT = "semantic-classifier"
FILE_VERSION = "1.0"


class SemanticClassifier:
    """Latent semantic text classifier.

    Example::

        classifier = SemanticClassifier()
        classifier.add_category("Sports")
        classifier.add_category("Finance")
        classifier.add_training_string("score goal match", "Sports")
        classifier.add_training_string("stock bond market", "Finance")

        results = classifier.get_results("goal score", max_results=1)
        print(results.name_at(0))   # "Sports"

        classifier.save("model.json")
        loaded = SemanticClassifier.from_file("model.json")

    Args:
        tokenizer: Tokenizer used for training and query text. Defaults to
            ``DefaultTokenizer`` configured from ``config``.
        config: Engine configuration.
    """

    def __init__(
        self,
        tokenizer: Optional[Tokenizer] = None,
        config: Optional[ClassifierConfig] = None,
    ) -> None:
        self._config = config or ClassifierConfig()
        self._custom_tokenizer = tokenizer is not None
        self._tokenizer = tokenizer or DefaultTokenizer(self._config.min_token_length)
        self._registry = CategoryRegistry()
        self._builder = SemanticSpaceBuilder(self._registry, self._config)
        self._map: Optional[SemanticMap] = None
        self._mode = Mode.TRAINING
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def config(self) -> ClassifierConfig:
        return self._config

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    @property
    def is_compiled(self) -> bool:
        """Whether a semantic map matching the current training data exists."""
        return self._map is not None

    @property
    def semantic_map(self) -> Optional[SemanticMap]:
        """The compiled semantic map (read-only), or None."""
        return self._map

    def reset(self) -> None:
        """Remove all categories and the compiled map; switch to training."""
        with self._lock:
            self._registry.remove_all()
            self._map = None
            self._transition(Mode.TRAINING)
            logger.info("Classifier reset")

    def remove_all(self) -> None:
        """Remove every category. Equivalent to ``reset``."""
        self.reset()

    def set_mode(self, mode: Union[Mode, str]) -> None:
        """Switch mode explicitly.

        Switching to evaluation compiles the semantic map if none exists.

        Raises:
            InvalidModeError: If ``mode`` is not a valid mode.
            ModeTransitionError: If evaluation is requested but no map can
                be compiled from the current training data.
        """
        mode = self._coerce_mode(mode)
        with self._lock:
            if mode is Mode.EVALUATION and self._map is None:
                try:
                    self._compile_locked()
                except CompilationError as exc:
                    raise ModeTransitionError(
                        f"Cannot switch to evaluation mode: {exc}"
                    ) from exc
            self._transition(mode)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def add_category(self, name: str) -> None:
        """Add a new, empty category.

        Switches to training mode on success.

        Raises:
            DuplicateCategoryError: If the category already exists.
            InvalidInputError: If ``name`` is not a non-empty string.
        """
        with self._lock:
            self._registry.add(name)
            self._invalidate()
            self._transition(Mode.TRAINING)
            logger.debug("Added category %r", name)

    def category_count(self) -> int:
        with self._lock:
            return len(self._registry)

    def has_category(self, name: str) -> bool:
        with self._lock:
            return name in self._registry

    def category_names(self) -> Iterator[str]:
        """Iterate category names in insertion order, as of this call."""
        with self._lock:
            return iter(list(self._registry.names()))

    def for_each_category(self, visitor: Callable[[str], bool]) -> None:
        """Call ``visitor(name)`` per category; a True return stops early."""
        for name in self.category_names():
            if visitor(name):
                break

    def centroid(self, name: str) -> np.ndarray:
        """Return a copy of a category's latent-space centroid.

        Raises:
            NoSuchCategoryError: If the category does not exist.
            CompilationError: If the category has not been compiled.
        """
        with self._lock:
            category = self._registry.get(name)
            if category.centroid is None:
                raise CompilationError(f"Category {name!r} has not been compiled")
            return category.centroid.copy()

    def describe(self) -> dict:
        """Summary of the classifier state, safe to serialize."""
        with self._lock:
            return {
                "mode": self._mode.value,
                "compiled": self._map is not None,
                "dimensions": self._map.dimensions if self._map else None,
                "vocabulary_size": self._map.vocabulary_size if self._map else None,
                "categories": [
                    {
                        "name": c.name,
                        "document_count": c.document_count,
                        "term_count": len(c.term_counts),
                        "term_mass": c.term_mass,
                    }
                    for c in self._registry
                ],
            }

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def add_training(
        self,
        data: TextInput,
        category: str,
        options: TextOptions = TextOptions.NONE,
    ) -> None:
        """Tokenize text or bytes and add it to a category's training data.

        Switches to training mode on success and drops the compiled map.

        Raises:
            NoSuchCategoryError: If the category does not exist.
            InvalidInputError: If the input cannot be decoded as text.
        """
        with self._lock:
            vector = self._tokenizer.tokenize(data, options)
            self._builder.accumulate(category, vector)
            self._invalidate()
            self._transition(Mode.TRAINING)

    def add_training_string(
        self,
        text: str,
        category: str,
        options: TextOptions = TextOptions.NONE,
    ) -> None:
        """Add training text to the category."""
        self.add_training(text, category, options)

    def add_training_data(self, data: bytes, category: str) -> None:
        """Add UTF-8 encoded training data to the category."""
        self.add_training(data, category)

    def compile(self) -> SemanticMap:
        """Compile the semantic map now, without changing mode.

        Raises:
            CompilationError: If fewer than two categories have training data.
        """
        with self._lock:
            return self._compile_locked()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def get_results(
        self,
        data: TextInput,
        max_results: Optional[int] = None,
        options: TextOptions = TextOptions.NONE,
    ) -> ClassifierResults:
        """Score text against every category.

        In training mode the semantic map is compiled first and the
        classifier switches to evaluation mode.

        Args:
            data: Text, or UTF-8 encoded bytes.
            max_results: Maximum number of results. Defaults to
                ``config.default_max_results``.
            options: Tokenization flags; use the same flags as training.

        Returns:
            ClassifierResults, best match first.

        Raises:
            CompilationError: If the map must be compiled and cannot be.
            InvalidInputError: If the input cannot be decoded as text.
        """
        if max_results is None:
            max_results = self._config.default_max_results

        with self._lock:
            vector = self._tokenizer.tokenize(data, options)
            if self._mode is Mode.TRAINING or self._map is None:
                self._compile_locked()
                self._transition(Mode.EVALUATION)

            query = self._map.project(vector)
            if not np.any(query):
                logger.warning("Query shares no terms with the training data")
            return rank(query, self._registry, max_results)

    def get_results_for_string(
        self,
        text: str,
        max_results: Optional[int] = None,
        options: TextOptions = TextOptions.NONE,
    ) -> ClassifierResults:
        return self.get_results(text, max_results, options)

    def get_results_for_data(
        self,
        data: bytes,
        max_results: Optional[int] = None,
    ) -> ClassifierResults:
        return self.get_results(data, max_results)

    def classify(
        self,
        data: TextInput,
        options: TextOptions = TextOptions.NONE,
    ) -> Optional[str]:
        """Return the best matching category name, or None without categories."""
        return self.get_results(data, 1, options).name_at(0)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> None:
        """Write categories, training statistics and the semantic map as JSON.

        Parent directories are created as needed.

        Raises:
            WriteError: If the file cannot be written.
        """
        path = Path(path)
        with self._lock:
            model_data = {
                "format": FILE_FORMAT,
                "version": FILE_VERSION,
                "mode": self._mode.value,
                "config": self._config.to_dict(),
                "categories": [c.to_dict() for c in self._registry],
                "semantic_map": self._map.to_dict() if self._map else None,
            }
            tmp_path: Optional[Path] = None
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                # Write a sibling file, then swap it in
                with tempfile.NamedTemporaryFile(
                    "w", encoding="utf-8", dir=path.parent,
                    prefix=f".{path.name}.", suffix=".tmp", delete=False,
                ) as f:
                    tmp_path = Path(f.name)
                    json.dump(model_data, f, indent=2)
                os.replace(tmp_path, path)
            except (OSError, TypeError, ValueError) as exc:
                if tmp_path is not None:
                    tmp_path.unlink(missing_ok=True)
                raise WriteError(f"Cannot write classifier to {path}: {exc}") from exc
        logger.info("Saved classifier with %d categories to %s", len(model_data["categories"]), path)

    def load(
        self,
        path: Union[str, Path],
        mode: Union[Mode, str] = Mode.EVALUATION,
    ) -> None:
        """Replace this classifier's state with a saved one and set ``mode``.

        The current state is left untouched if loading fails.

        Raises:
            InvalidModeError: If ``mode`` is not a valid mode.
            BadPathError: If ``path`` does not exist.
            ModeTransitionError: If evaluation is requested but the file has
                no semantic map and none can be compiled.
            ClassifierError: If the file is not a valid saved classifier.
        """
        mode = self._coerce_mode(mode)
        path = Path(path)
        if not path.exists():
            raise BadPathError(f"No such file: {path}")

        data = self._read_model_file(path)
        config, categories, semantic_map = self._parse_model_data(data, path)

        registry = CategoryRegistry()
        registry.replace(categories)
        builder = SemanticSpaceBuilder(registry, config)
        if mode is Mode.EVALUATION and semantic_map is None:
            try:
                semantic_map = builder.compile()
            except CompilationError as exc:
                raise ModeTransitionError(
                    f"Cannot load {path} in evaluation mode: {exc}"
                ) from exc

        with self._lock:
            self._config = config
            if not self._custom_tokenizer:
                self._tokenizer = DefaultTokenizer(config.min_token_length)
            self._registry = registry
            self._builder = builder
            self._map = semantic_map
            self._mode = mode
        logger.info("Loaded classifier with %d categories from %s (%s mode)",
                    len(categories), path, mode.value)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        mode: Union[Mode, str] = Mode.EVALUATION,
        tokenizer: Optional[Tokenizer] = None,
    ) -> "SemanticClassifier":
        """Create a classifier from a saved file."""
        classifier = cls(tokenizer=tokenizer)
        classifier.load(path, mode)
        return classifier

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _compile_locked(self) -> SemanticMap:
        self._map = self._builder.compile()
        return self._map

    def _invalidate(self) -> None:
        if self._map is not None:
            logger.debug("Training data changed; dropping compiled semantic map")
            self._map = None
            SemanticSpaceBuilder.clear_centroids(list(self._registry))

    def _transition(self, mode: Mode) -> None:
        if mode is not self._mode:
            logger.info("Classifier mode %s -> %s", self._mode.value, mode.value)
            self._mode = mode

    @staticmethod
    def _coerce_mode(mode: Union[Mode, str]) -> Mode:
        if isinstance(mode, Mode):
            return mode
        if isinstance(mode, str):
            try:
                return Mode(mode.lower())
            except ValueError:
                pass
        raise InvalidModeError(f"Invalid mode: {mode!r}")

    @staticmethod
    def _read_model_file(path: Path) -> dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ClassifierError(f"Cannot read classifier from {path}: {exc}") from exc
        if not isinstance(data, dict) or data.get("format") != FILE_FORMAT:
            raise ClassifierError(f"{path} is not a saved semantic classifier")
        return data

    @staticmethod
    def _parse_model_data(
        data: dict,
        path: Path,
    ) -> tuple[ClassifierConfig, list[Category], Optional[SemanticMap]]:
        try:
            config = ClassifierConfig.from_dict(data.get("config") or {})
            categories = [Category.from_dict(c) for c in data["categories"]]
            map_data = data.get("semantic_map")
            semantic_map = SemanticMap.from_dict(map_data) if map_data else None
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ClassifierError(f"Corrupt classifier file {path}: {exc}") from exc

        names = [c.name for c in categories]
        if len(set(names)) != len(names):
            raise ClassifierError(f"Corrupt classifier file {path}: duplicate category names")

        if semantic_map is not None:
            for category in categories:
                if category.centroid is None or category.centroid.shape != (semantic_map.dimensions,):
                    raise ClassifierError(
                        f"Corrupt classifier file {path}: centroid of {category.name!r} "
                        f"does not match the semantic map"
                    )
        else:
            SemanticSpaceBuilder.clear_centroids(categories)
        return config, categories, semantic_map
