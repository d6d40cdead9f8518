"""Tokenization and normalization of training and query text.

Turns raw text (or UTF-8 bytes) into a term vector: a dict mapping each
normalized token to its number of occurrences. Behavior is controlled by
``TextOptions`` flags:

- ``PRESERVE_CASE``: keep the original letter case of tokens
- ``PRESERVE_ACRONYMS``: keep acronyms (``U.S.A.``, ``NASA``) exactly as
  written instead of collapsing their variants into one token
- ``APPLY_SPAM_HEURISTICS``: undo common obfuscation tricks such as
  character substitution (``v1agra``), split letters (``f-r-e-e``),
  letter stretching (``freeeee``) and invisible characters

The engine only depends on the ``Tokenizer`` interface, so a custom
segmentation strategy can be plugged in at construction time.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from abc import ABC, abstractmethod
from collections import Counter
from typing import Union

from .errors import InvalidInputError
from .models import TextOptions

logger = logging.getLogger(__name__)

TextInput = Union[str, bytes, bytearray, memoryview]

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Letters followed by dots, at least twice: "U.S.A.", "e.g."
_ACRONYM = r"(?:[^\W\d_]\.){2,}"
_WORD = r"[^\W_]+(?:['-][^\W_]+)*"
_TOKEN_RE = re.compile(rf"{_ACRONYM}|{_WORD}")

# In spam mode a few symbols count as word characters so that "c@sh" or
# "$ave" survive segmentation and can be decoded afterwards.
_SPAM_CHAR = r"(?:[^\W_]|[@$!|])"
_SPAM_TOKEN_RE = re.compile(rf"{_ACRONYM}|{_SPAM_CHAR}+(?:['-]{_SPAM_CHAR}+)*")

_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff\xad]")

# Single letters glued by separators: "v-i-a-g-r-a", "f*r*e*e", "f_r_e_e"
_SPLIT_LETTERS_RE = re.compile(r"(?<!\w)(?:[^\W\d_][-_*~.]){2,}[^\W\d_](?!\w)")
_SEPARATORS_RE = re.compile(r"[-_*~.]")

# Three or more repeats of the same letter
_STRETCHED_RE = re.compile(r"([^\W\d_])\1{2,}")

_LEET_MAP: dict[str, str] = {
    "0": "o",
    "1": "i",
    "3": "e",
    "4": "a",
    "5": "s",
    "7": "t",
    "@": "a",
    "$": "s",
    "!": "i",
    "|": "l",
}
_LEET_TABLE = str.maketrans(_LEET_MAP)
_SYMBOLS_TABLE = str.maketrans("", "", "@$!|")

_TYPOGRAPHIC_TABLE = str.maketrans({
    "\u201c": '"',
    "\u201d": '"',
    "\u2018": "'",
    "\u2019": "'",
    "\u2013": "-",
    "\u2014": "-",
    "\xa0": " ",
})


# ---------------------------------------------------------------------------
# Tokenizer interface
# ---------------------------------------------------------------------------


class Tokenizer(ABC):
    """Abstract base class for tokenizers.

    Implementations turn text or bytes into a term vector. They must be
    pure: the same input and options always give the same vector.
    """

    @abstractmethod
    def tokenize(
        self,
        data: TextInput,
        options: TextOptions = TextOptions.NONE,
    ) -> dict[str, float]:
        """Convert input into a term vector.

        Args:
            data: Text, or bytes holding UTF-8 encoded text.
            options: Normalization flags.

        Returns:
            Dict of {term: weight} with non-negative weights.

        Raises:
            InvalidInputError: If the input cannot be decoded as text.
        """
        ...

    @staticmethod
    def decode(data: TextInput) -> str:
        """Return ``data`` as a string, decoding bytes as UTF-8."""
        if isinstance(data, str):
            return data
        if isinstance(data, (bytes, bytearray, memoryview)):
            try:
                return bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidInputError(f"Input is not valid UTF-8 text: {exc}") from exc
        raise InvalidInputError(
            f"Expected str or bytes, got {type(data).__name__}"
        )


class DefaultTokenizer(Tokenizer):
    """Regex-based word tokenizer with case, acronym and spam handling.

    Subclasses can override ``segment`` to change how tokens are found
    while keeping decoding and counting.

    Example::

        tokenizer = DefaultTokenizer()
        tokenizer.tokenize("The U.S.A. and the USA")
        # {"the": 2.0, "usa": 2.0, "and": 1.0}

    Args:
        min_token_length: Tokens shorter than this are dropped.
    """

    def __init__(self, min_token_length: int = 1) -> None:
        if min_token_length < 1:
            raise ValueError("min_token_length must be at least 1")
        self.min_token_length = min_token_length

    def tokenize(
        self,
        data: TextInput,
        options: TextOptions = TextOptions.NONE,
    ) -> dict[str, float]:
        text = self.decode(data)
        options = TextOptions(options)
        counts = Counter(self.segment(text, options))
        logger.debug("Tokenized %d chars into %d distinct terms", len(text), len(counts))
        return {term: float(count) for term, count in counts.items()}

    def segment(self, text: str, options: TextOptions = TextOptions.NONE) -> list[str]:
        """Split text into normalized tokens, in order of appearance."""
        if not text:
            return []

        spam = bool(options & TextOptions.APPLY_SPAM_HEURISTICS)
        text = self._clean(text, spam)
        pattern = _SPAM_TOKEN_RE if spam else _TOKEN_RE

        tokens: list[str] = []
        for match in pattern.finditer(text):
            token = match.group()
            if spam:
                token = self._decode_obfuscation(token)
                if not token:
                    continue
            token = self._normalize(token, options)
            if len(token) >= self.min_token_length:
                tokens.append(token)
        return tokens

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _clean(text: str, spam: bool) -> str:
        # NFKC folds full-width and stylised letters used to dodge filters
        text = unicodedata.normalize("NFKC" if spam else "NFC", text)
        text = text.translate(_TYPOGRAPHIC_TABLE)
        if spam:
            text = _INVISIBLE_RE.sub("", text)
            text = _SPLIT_LETTERS_RE.sub(
                lambda m: _SEPARATORS_RE.sub("", m.group()), text
            )
        return text

    @staticmethod
    def _decode_obfuscation(token: str) -> str:
        """Undo leetspeak substitutions and letter stretching."""
        if any(c.isalpha() for c in token):
            token = token.rstrip("!|")
            others = [c for c in token if not c.isalpha() and c not in "'-"]
            # Only decode when every non-letter is a known substitute and the
            # token does not end in a digit: "v1agra", "l33t" and "c@sh", but
            # not "b2b", "mp3", "win7" or "h1n1"
            if others and all(c in _LEET_MAP for c in others) and not token[-1].isdigit():
                token = token.translate(_LEET_TABLE)
            return _STRETCHED_RE.sub(r"\1\1", token)
        # Numbers keep their digits but lose stray symbols ("$50" -> "50")
        return token.translate(_SYMBOLS_TABLE)

    @staticmethod
    def is_acronym(token: str) -> bool:
        """Return True for dotted acronyms and all-caps words of 2+ letters."""
        if re.fullmatch(_ACRONYM, token):
            return True
        return token.isupper() and sum(c.isalpha() for c in token) >= 2

    def _normalize(self, token: str, options: TextOptions) -> str:
        if self.is_acronym(token):
            if options & TextOptions.PRESERVE_ACRONYMS:
                return token
            token = token.replace(".", "")
        if not options & TextOptions.PRESERVE_CASE:
            token = token.casefold()
        return token
