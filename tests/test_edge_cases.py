"""Edge-case and regression tests for the classifier engine."""

from __future__ import annotations

import numpy as np
import pytest

from semantic_classifier import (
    ClassifierConfig,
    ClassifierError,
    CompilationError,
    InvalidInputError,
    Mode,
    SemanticClassifier,
    TextOptions,
)

# ---------------------------------------------------------------------------
# Input edge cases
# ---------------------------------------------------------------------------


class TestInputEdgeCases:
    """Unusual training and query input."""

    def test_empty_training_text(self, sports_finance: SemanticClassifier) -> None:
        """Empty text counts as a document but adds no terms."""
        sports_finance.add_training_string("", "Sports")
        info = sports_finance.describe()["categories"][0]
        assert info["document_count"] == 2
        assert info["term_mass"] == 3.0

    def test_whitespace_query(self, sports_finance: SemanticClassifier) -> None:
        results = sports_finance.get_results("   \n\t ", 2)
        assert len(results) == 2
        assert all(score == 0.0 for _, score in results)

    def test_empty_bytes_query(self, sports_finance: SemanticClassifier) -> None:
        assert sports_finance.get_results(b"", 1).score_at(0) == 0.0

    def test_none_query_rejected(self, sports_finance: SemanticClassifier) -> None:
        with pytest.raises(InvalidInputError):
            sports_finance.get_results(None, 1)  # type: ignore[arg-type]

    def test_unicode_category_names(self) -> None:
        clf = SemanticClassifier()
        clf.add_category("Économie")
        clf.add_category("スポーツ")
        clf.add_training_string("marché bourse inflation", "Économie")
        clf.add_training_string("サッカー 野球", "スポーツ")
        assert clf.classify("inflation du marché") == "Économie"

    def test_very_long_document(self, sports_finance: SemanticClassifier) -> None:
        sports_finance.add_training_string("goal " * 10_000, "Sports")
        assert sports_finance.classify("goal") == "Sports"

    def test_huge_max_results(self, trained_classifier: SemanticClassifier) -> None:
        assert len(trained_classifier.get_results("goal", 10**9)) == 3

    def test_negative_max_results(self, trained_classifier: SemanticClassifier) -> None:
        results = trained_classifier.get_results("goal", -5)
        assert results.count() == 0
        assert results.name_at(0) is None

    def test_empty_category_name(self) -> None:
        with pytest.raises(InvalidInputError):
            SemanticClassifier().add_category("")


# ---------------------------------------------------------------------------
# Corpus shape edge cases
# ---------------------------------------------------------------------------


class TestCorpusEdgeCases:
    """Degenerate training corpora."""

    def test_identical_categories_tie(self) -> None:
        """Categories trained on the same text share a centroid and tie."""
        clf = SemanticClassifier()
        for name in ("First", "Second"):
            clf.add_category(name)
            clf.add_training_string("goal match score", name)
        results = clf.get_results("goal", 2)
        assert results.name_at(0) == "First"
        assert results.score_at(0) == pytest.approx(results.score_at(1))

    def test_shared_term_everywhere(self) -> None:
        """A term found in every category weighs less than a distinctive one."""
        clf = SemanticClassifier()
        clf.add_category("A")
        clf.add_category("B")
        clf.add_training_string("common alpha", "A")
        clf.add_training_string("common beta", "B")
        clf.compile()
        weights = clf.semantic_map.weight_vector({"common": 1.0, "alpha": 1.0})
        index = clf.semantic_map.vocabulary.index("alpha")
        assert weights[index] > weights[clf.semantic_map.vocabulary.index("common")]

    def test_single_dimension(self, corpus) -> None:
        clf = SemanticClassifier(config=ClassifierConfig(dimensions=1))
        for name, docs in corpus.items():
            clf.add_category(name)
            for doc in docs:
                clf.add_training_string(doc, name)
        results = clf.get_results("stock market", 3)
        assert clf.semantic_map.dimensions == 1
        assert len(results) == 3
        assert all(-1.0 <= s <= 1.0 for _, s in results)

    def test_many_categories(self) -> None:
        clf = SemanticClassifier()
        for i in range(50):
            name = f"topic{i}"
            clf.add_category(name)
            clf.add_training_string(f"word{i} shared", name)
        assert clf.classify("word37") == "topic37"

    def test_only_empty_documents(self) -> None:
        clf = SemanticClassifier()
        clf.add_category("A")
        clf.add_category("B")
        clf.add_training_string("...", "A")
        clf.add_training_string("", "B")
        with pytest.raises(CompilationError, match="no terms"):
            clf.compile()


# ---------------------------------------------------------------------------
# State edge cases
# ---------------------------------------------------------------------------


class TestStateEdgeCases:

    def test_set_same_mode_twice(self, sports_finance: SemanticClassifier) -> None:
        sports_finance.set_mode(Mode.EVALUATION)
        semantic_map = sports_finance.semantic_map
        sports_finance.set_mode(Mode.EVALUATION)
        assert sports_finance.semantic_map is semantic_map

    def test_centroids_cleared_on_invalidate(self, sports_finance: SemanticClassifier) -> None:
        sports_finance.compile()
        assert np.any(sports_finance.centroid("Finance"))
        sports_finance.add_training_string("dividend", "Finance")
        with pytest.raises(CompilationError):
            sports_finance.centroid("Finance")

    def test_all_errors_share_base(self) -> None:
        clf = SemanticClassifier()
        with pytest.raises(ClassifierError):
            clf.set_mode("bogus")
        with pytest.raises(ClassifierError):
            clf.get_results("goal")

    def test_error_to_dict(self) -> None:
        clf = SemanticClassifier()
        with pytest.raises(CompilationError) as info:
            clf.compile()
        payload = info.value.to_dict()
        assert payload["code"] == 1007
        assert payload["error"] == "CompilationError"

    def test_options_do_not_leak_between_calls(self) -> None:
        clf = SemanticClassifier()
        clf.add_category("Upper")
        clf.add_category("Lower")
        clf.add_training_string("Apple", "Upper", TextOptions.PRESERVE_CASE)
        clf.add_training_string("pear", "Lower")
        assert "Apple" in clf.compile()
        assert "apple" not in clf.semantic_map
