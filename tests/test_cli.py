"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from semantic_classifier.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def model_file(runner, corpus_dir, tmp_path):
    path = tmp_path / "model.json"
    result = runner.invoke(main, ["train", str(corpus_dir), "--model", str(path)])
    assert result.exit_code == 0, result.output
    return path


class TestTrain:

    def test_train_writes_model(self, model_file):
        data = json.loads(model_file.read_text(encoding="utf-8"))
        assert [c["name"] for c in data["categories"]] == ["Cooking", "Finance", "Sports"]
        assert all(c["document_count"] == 4 for c in data["categories"])

    def test_train_output_lists_categories(self, runner, corpus_dir, tmp_path):
        result = runner.invoke(main, ["train", str(corpus_dir), "-m", str(tmp_path / "m.json")])
        assert result.exit_code == 0
        assert "Sports" in result.output
        assert "Vocabulary" in result.output

    def test_train_dimensions(self, runner, corpus_dir, tmp_path):
        path = tmp_path / "m.json"
        result = runner.invoke(main, ["train", str(corpus_dir), "-m", str(path), "-d", "2"])
        assert result.exit_code == 0
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["config"]["dimensions"] == 2
        assert len(data["semantic_map"]["singular_values"]) == 2

    def test_train_empty_corpus(self, runner, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(main, ["train", str(empty), "-m", str(tmp_path / "m.json")])
        assert result.exit_code == 1
        assert "no category" in result.output

    def test_train_single_category_fails(self, runner, tmp_path):
        corpus = tmp_path / "corpus"
        (corpus / "Only").mkdir(parents=True)
        (corpus / "Only" / "a.txt").write_text("goal match", encoding="utf-8")
        result = runner.invoke(main, ["train", str(corpus), "-m", str(tmp_path / "m.json")])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert not (tmp_path / "m.json").exists()

    def test_train_missing_corpus(self, runner, tmp_path):
        result = runner.invoke(main, ["train", str(tmp_path / "nope"), "-m", str(tmp_path / "m.json")])
        assert result.exit_code == 2


class TestClassify:

    def test_classify_json(self, runner, model_file):
        result = runner.invoke(
            main, ["classify", str(model_file), "investors sold stock", "--output", "json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["count"] == 3
        assert data["results"][0]["category"] == "Finance"
        assert data["results"][0]["rank"] == 1

    def test_classify_max_results(self, runner, model_file):
        result = runner.invoke(
            main, ["classify", str(model_file), "bake the bread", "-n", "1", "-o", "json"]
        )
        data = json.loads(result.output)
        assert data["count"] == 1
        assert data["results"][0]["category"] == "Cooking"

    def test_classify_from_file(self, runner, model_file, tmp_path):
        text_file = tmp_path / "query.txt"
        text_file.write_text("the striker scored a goal", encoding="utf-8")
        result = runner.invoke(
            main, ["classify", str(model_file), "--file", str(text_file), "-o", "json"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["results"][0]["category"] == "Sports"

    def test_classify_rich_table(self, runner, model_file):
        result = runner.invoke(main, ["classify", str(model_file), "simmer the sauce"])
        assert result.exit_code == 0
        assert "Cooking" in result.output

    def test_classify_requires_text(self, runner, model_file):
        result = runner.invoke(main, ["classify", str(model_file)])
        assert result.exit_code == 2
        assert "Provide TEXT or --file" in result.output

    def test_classify_corrupt_model(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{}", encoding="utf-8")
        result = runner.invoke(main, ["classify", str(path), "goal"])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestCategories:

    def test_categories_json(self, runner, model_file):
        result = runner.invoke(main, ["categories", str(model_file), "-o", "json"])
        assert result.exit_code == 0, result.output
        info = json.loads(result.output)
        assert info["mode"] == "training"
        assert [c["name"] for c in info["categories"]] == ["Cooking", "Finance", "Sports"]

    def test_categories_table(self, runner, model_file):
        result = runner.invoke(main, ["categories", str(model_file)])
        assert result.exit_code == 0
        assert "Finance" in result.output
