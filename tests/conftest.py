"""Shared test fixtures for semantic-classifier tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from semantic_classifier import SemanticClassifier

SPORTS_DOCS = [
    "The striker scored a late goal to win the match for the home team.",
    "The coach praised the defense after the team kept a clean sheet in the league match.",
    "Fans cheered as the goalkeeper saved a penalty in the final minutes of the game.",
    "The tennis player won the championship after a five set match on the grass court.",
]

FINANCE_DOCS = [
    "Stock prices fell sharply as investors sold shares on the market.",
    "The central bank raised interest rates and bond yields climbed higher.",
    "Quarterly earnings beat forecasts and the company stock rallied in early trading.",
    "Investors moved money from equities into government bonds as the market cooled.",
]

COOKING_DOCS = [
    "Whisk the eggs with sugar and fold in the flour before baking the cake.",
    "Simmer the tomato sauce with garlic and basil, then season with salt.",
    "Roast the vegetables in the oven until golden and serve with fresh herbs.",
    "Knead the dough, let it rise, then bake the bread until the crust is crisp.",
]


@pytest.fixture
def corpus() -> dict[str, list[str]]:
    """Synthetic corpus keyed by category name, in insertion order."""
    return {
        "Sports": SPORTS_DOCS,
        "Finance": FINANCE_DOCS,
        "Cooking": COOKING_DOCS,
    }


@pytest.fixture
def trained_classifier(corpus: dict[str, list[str]]) -> SemanticClassifier:
    """Classifier with three trained categories, still in training mode."""
    classifier = SemanticClassifier()
    for name, docs in corpus.items():
        classifier.add_category(name)
        for doc in docs:
            classifier.add_training_string(doc, name)
    return classifier


@pytest.fixture
def sports_finance() -> SemanticClassifier:
    """The minimal two-category classifier."""
    classifier = SemanticClassifier()
    classifier.add_category("Sports")
    classifier.add_category("Finance")
    classifier.add_training_string("score goal match", "Sports")
    classifier.add_training_string("stock bond market", "Finance")
    return classifier


@pytest.fixture
def corpus_dir(tmp_path: Path, corpus: dict[str, list[str]]) -> Path:
    """Corpus laid out on disk: one directory per category, one file per document."""
    root = tmp_path / "corpus"
    for name, docs in corpus.items():
        category_dir = root / name
        category_dir.mkdir(parents=True)
        for i, doc in enumerate(docs):
            (category_dir / f"doc{i:02d}.txt").write_text(doc, encoding="utf-8")
    return root
