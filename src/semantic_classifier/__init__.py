"""Semantic Classifier -- latent semantic text classification."""

__version__ = "1.0.0"

from .config import ClassifierConfig
from .engine import SemanticClassifier
from .errors import (
    BadPathError,
    ClassifierError,
    CompilationError,
    DuplicateCategoryError,
    InvalidInputError,
    InvalidModeError,
    ModeTransitionError,
    NoSuchCategoryError,
    StorageError,
    WriteError,
)
from .models import Category, ClassifierResults, Mode, TextOptions
from .ranking import cosine_scores, rank
from .registry import CategoryRegistry
from .semantic_map import SemanticMap, SemanticSpaceBuilder
from .tokenizer import DefaultTokenizer, Tokenizer

__all__ = [
    # Core
    "SemanticClassifier",
    "ClassifierConfig",
    "Mode",
    "TextOptions",
    # Results
    "ClassifierResults",
    "rank",
    "cosine_scores",
    # Building blocks
    "Category",
    "CategoryRegistry",
    "SemanticMap",
    "SemanticSpaceBuilder",
    "Tokenizer",
    "DefaultTokenizer",
    # Errors
    "ClassifierError",
    "DuplicateCategoryError",
    "NoSuchCategoryError",
    "StorageError",
    "WriteError",
    "BadPathError",
    "InvalidModeError",
    "ModeTransitionError",
    "CompilationError",
    "InvalidInputError",
]
