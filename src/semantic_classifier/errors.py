"""Exception hierarchy for the semantic classifier.

Every error raised by the library derives from ``ClassifierError`` and
carries a numeric ``code`` that callers can match on.

Errors fall into three groups:

- caller-input errors (``DuplicateCategoryError``, ``NoSuchCategoryError``,
  ``InvalidModeError``, ``InvalidInputError``) -- also ``ValueError``
- storage errors (``BadPathError``, ``WriteError``) -- ``StorageError``
- model errors (``CompilationError``, ``ModeTransitionError``)
"""

from __future__ import annotations


class ClassifierError(Exception):
    """Generic classifier failure (code 1000)."""

    code: int = 1000

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or "")
        self.message = message

    def to_dict(self) -> dict:
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": str(self),
        }


class DuplicateCategoryError(ClassifierError, ValueError):
    """The category is already in the map."""

    code = 1001


class NoSuchCategoryError(ClassifierError, ValueError):
    """The category does not exist."""

    code = 1002


class StorageError(ClassifierError):
    """Base class for errors reading or writing a saved classifier."""


class WriteError(StorageError):
    """An error occurred writing the classifier."""

    code = 1003


class BadPathError(StorageError):
    """The path does not exist."""

    code = 1004


class InvalidModeError(ClassifierError, ValueError):
    """The requested mode is not valid."""

    code = 1005


class ModeTransitionError(ClassifierError):
    """Failed to switch mode."""

    code = 1006


class CompilationError(ClassifierError):
    """The semantic map could not be compiled from the training data."""

    code = 1007


class InvalidInputError(ClassifierError, ValueError):
    """The input could not be interpreted as text."""

    code = 1008
