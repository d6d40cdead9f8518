"""Command-line interface for Semantic Classifier.

Provides ``train``, ``classify``, and ``categories`` commands with rich
terminal output using the ``click`` and ``rich`` libraries.

A training corpus is a directory with one sub-directory per category;
every ``*.txt`` file inside a sub-directory is one training document.

Usage::

    semantic-classifier train corpus/ --model model.json
    semantic-classifier classify model.json "the striker scored a goal"
    semantic-classifier categories model.json
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ClassifierConfig
from .engine import SemanticClassifier
from .errors import ClassifierError
from .models import ClassifierResults, Mode, TextOptions

console = Console()


def _text_options(preserve_case: bool, preserve_acronyms: bool, spam_heuristics: bool) -> TextOptions:
    options = TextOptions.NONE
    if preserve_case:
        options |= TextOptions.PRESERVE_CASE
    if preserve_acronyms:
        options |= TextOptions.PRESERVE_ACRONYMS
    if spam_heuristics:
        options |= TextOptions.APPLY_SPAM_HEURISTICS
    return options


def _option_flags(func):
    """Attach the shared tokenization flags to a command."""
    func = click.option("--spam-heuristics", is_flag=True,
                        help="Undo common spam obfuscation tricks.")(func)
    func = click.option("--preserve-acronyms", is_flag=True,
                        help="Keep acronyms exactly as written.")(func)
    func = click.option("--preserve-case", is_flag=True,
                        help="Do not case-fold tokens.")(func)
    return func


def _score_style(score: float) -> str:
    if score > 0.7:
        return "bold green"
    if score > 0.3:
        return "bold yellow"
    return "dim"


@click.group()
@click.version_option(package_name="semantic-classifier")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """Semantic Classifier -- latent semantic text classification.

    Train categories from example documents, then rank new text by
    similarity to each category.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@main.command()
@click.argument("corpus", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--model", "-m", "model_path", type=click.Path(dir_okay=False, path_type=Path),
              required=True, help="Where to save the trained model.")
@click.option("--dimensions", "-d", type=click.IntRange(min=1), default=100, show_default=True,
              help="Maximum number of latent dimensions.")
@_option_flags
def train(
    corpus: Path,
    model_path: Path,
    dimensions: int,
    preserve_case: bool,
    preserve_acronyms: bool,
    spam_heuristics: bool,
) -> None:
    """Train a classifier from a directory of categorized text files.

    Example: semantic-classifier train corpus/ --model model.json
    """
    options = _text_options(preserve_case, preserve_acronyms, spam_heuristics)
    classifier = SemanticClassifier(config=ClassifierConfig(dimensions=dimensions))

    category_dirs = sorted(p for p in corpus.iterdir() if p.is_dir())
    if not category_dirs:
        console.print(f"[bold red]Error:[/] {corpus} has no category sub-directories")
        sys.exit(1)

    with console.status("[bold blue]Training classifier...", spinner="dots"):
        try:
            for category_dir in category_dirs:
                classifier.add_category(category_dir.name)
                for doc in sorted(category_dir.glob("*.txt")):
                    classifier.add_training(doc.read_bytes(), category_dir.name, options)
            semantic_map = classifier.compile()
            classifier.save(model_path)
        except (ClassifierError, OSError) as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    info = classifier.describe()
    table = Table(title=f"Trained categories -- {model_path.name}")
    table.add_column("Category", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Distinct terms", justify="right")
    for cat in info["categories"]:
        table.add_row(cat["name"], str(cat["document_count"]), str(cat["term_count"]))
    console.print(table)
    console.print(
        f"Vocabulary: {semantic_map.vocabulary_size} terms | "
        f"Latent dimensions: {semantic_map.dimensions}"
    )
    console.print(f"[dim]Model saved to {model_path}[/]")


@main.command()
@click.argument("model_path", metavar="MODEL", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("text", required=False)
@click.option("--file", "-f", "text_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Read the text to classify from a file.")
@click.option("--max-results", "-n", type=int, default=None,
              help="Maximum number of categories to show.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@_option_flags
def classify(
    model_path: Path,
    text: str | None,
    text_file: Path | None,
    max_results: int | None,
    output: str,
    preserve_case: bool,
    preserve_acronyms: bool,
    spam_heuristics: bool,
) -> None:
    """Rank categories for a piece of text.

    Example: semantic-classifier classify model.json "quarterly bond yields"
    """
    if text is None and text_file is None:
        raise click.UsageError("Provide TEXT or --file.")

    options = _text_options(preserve_case, preserve_acronyms, spam_heuristics)
    try:
        classifier = SemanticClassifier.from_file(model_path, Mode.EVALUATION)
        data = text_file.read_bytes() if text_file is not None else text
        results = classifier.get_results(data, max_results, options)
    except (ClassifierError, OSError) as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    if output == "json":
        click.echo(json.dumps(results.to_dict(), indent=2))
    else:
        _render_results(results)


@main.command()
@click.argument("model_path", metavar="MODEL", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def categories(model_path: Path, output: str) -> None:
    """List the categories stored in a model."""
    try:
        classifier = SemanticClassifier.from_file(model_path, Mode.TRAINING)
    except ClassifierError as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    info = classifier.describe()
    if output == "json":
        click.echo(json.dumps(info, indent=2))
        return

    table = Table(title=f"Categories -- {model_path.name}")
    table.add_column("#", justify="right", width=4)
    table.add_column("Category", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Distinct terms", justify="right")
    for i, cat in enumerate(info["categories"], 1):
        table.add_row(str(i), cat["name"], str(cat["document_count"]), str(cat["term_count"]))
    console.print(table)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_results(results: ClassifierResults) -> None:
    """Render ranked results as a rich table."""
    if not results:
        console.print("[dim]No results.[/]")
        return

    table = Table(title="Classification results")
    table.add_column("Rank", justify="right", width=5)
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right", width=8)

    for i, (name, score) in enumerate(results, 1):
        style = _score_style(score)
        table.add_row(str(i), name, f"[{style}]{score:.4f}[/]")

    console.print(table)


if __name__ == "__main__":
    main()
