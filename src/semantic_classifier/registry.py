"""Insertion-ordered registry of named categories."""

from __future__ import annotations

from typing import Iterator

from .errors import DuplicateCategoryError, InvalidInputError, NoSuchCategoryError
from .models import Category


class CategoryRegistry:
    """Owns the categories of one classifier, in the order they were added."""

    def __init__(self) -> None:
        self._categories: dict[str, Category] = {}

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    def __iter__(self) -> Iterator[Category]:
        return iter(list(self._categories.values()))

    def count(self) -> int:
        return len(self._categories)

    def add(self, name: str) -> Category:
        """Register a new, empty category.

        Raises:
            InvalidInputError: If ``name`` is not a non-empty string.
            DuplicateCategoryError: If the name is already registered.
        """
        if not isinstance(name, str) or not name:
            raise InvalidInputError(f"Category name must be a non-empty string, got {name!r}")
        if name in self._categories:
            raise DuplicateCategoryError(f"Category already exists: {name}")
        category = Category(name=name)
        self._categories[name] = category
        return category

    def get(self, name: str) -> Category:
        """Return the category called ``name``.

        Raises:
            NoSuchCategoryError: If no such category is registered.
        """
        try:
            return self._categories[name]
        except (KeyError, TypeError) as exc:
            raise NoSuchCategoryError(f"No such category: {name}") from exc

    def names(self) -> Iterator[str]:
        """Yield category names in insertion order.

        Each call starts a fresh pass; stop early by breaking out of the loop.
        """
        for name in list(self._categories):
            yield name

    def remove_all(self) -> None:
        self._categories.clear()

    def replace(self, categories: list[Category]) -> None:
        """Swap in a complete set of categories (used when loading)."""
        self._categories = {c.name: c for c in categories}
