"""Text normalisation shared by product matching and report header detection."""

import re
import unicodedata

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_WHITESPACE_RUN = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[-/\\^$*+?.()|\[\]{}]")


def normalize_string(value: str) -> str:
    """
    Normalise a name for comparison.

    Trims, lower-cases, strips diacritics, collapses whitespace and drops
    hyphens and simple punctuation, so "X-Tudo  Especial" and "xtudo especial"
    compare equal.
    """
    text = value.strip().lower()
    text = _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", text))
    text = _WHITESPACE_RUN.sub(" ", text)
    return _PUNCTUATION.sub("", text)


def singular(value: str) -> str:
    """Drop one trailing "s" (naive Portuguese plural)."""
    return value[:-1] if value.endswith("s") else value
