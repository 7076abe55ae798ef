"""Deterministic query normalization and tokenization."""

import re

_TOKEN_SPLIT_RE = re.compile(r"[\s,.;:]+")
_WORD_RE = re.compile(r"\w+")
_WS_RE = re.compile(r"\s+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse whitespace to single spaces."""
    if text is None:
        return ""
    return _WS_RE.sub(" ", text).strip()


def split_tokens(query: str | None) -> list[str]:
    """Split a query into tokens on whitespace and light punctuation."""
    if not query:
        return []
    return [token for token in _TOKEN_SPLIT_RE.split(query) if token]


def word_spans(text: str) -> list[tuple[int, int]]:
    """Start/end offsets of every word in `text`."""
    return [match.span() for match in _WORD_RE.finditer(text)]
