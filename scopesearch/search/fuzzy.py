"""Edit-distance tolerant field matching.

`FuzzyIndex` is the seam the query engine searches through. The default
`SequenceMatcherIndex` scores a query against every configured field of every
item with `difflib.SequenceMatcher`, so any other matcher (trigram, BM25, ...)
can replace it without touching query logic.
"""

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Any, Mapping, Protocol, Sequence

from .tokenize import word_spans

PERFECT_SCORE = 0.0
NO_MATCH_SCORE = 1.0


@dataclass(frozen=True)
class FuzzyHit:
    """One matched item. Lower score is better; 0.0 is an exact substring."""

    item: Any
    ref_index: int
    score: float


class FuzzyIndex(Protocol):
    def build(self, items: Sequence[Mapping[str, Any]], fields: Sequence[str]) -> None: ...

    def search(self, query: str) -> list[FuzzyHit]: ...


def field_values(item: Mapping[str, Any], path: str) -> list[str]:
    """Resolve a dotted field path to the list of strings it holds."""
    current: Any = item
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return []
        current = current.get(part)

    if current is None:
        return []
    if isinstance(current, (list, tuple, set)):
        return [str(v) for v in current if v is not None and not isinstance(v, Mapping)]
    if isinstance(current, Mapping):
        return []
    return [str(current)]


@dataclass(frozen=True)
class _IndexedText:
    text: str
    spans: tuple[tuple[int, int], ...]


class SequenceMatcherIndex:
    """In-memory fuzzy index over a fixed list of fields."""

    def __init__(self, threshold: float = 0.35, min_match_chars: int = 2):
        self.threshold = threshold
        self.min_match_chars = min_match_chars
        self._items: list[Mapping[str, Any]] = []
        self._texts: list[tuple[_IndexedText, ...]] = []
        self.fields: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self._items)

    def build(self, items: Sequence[Mapping[str, Any]], fields: Sequence[str]) -> None:
        """Index `fields` of every item, replacing anything indexed before."""
        self.fields = tuple(fields)
        self._items = list(items)
        self._texts = []
        for item in self._items:
            texts: list[_IndexedText] = []
            if isinstance(item, Mapping):
                for path in self.fields:
                    for value in field_values(item, path):
                        lowered = value.lower()
                        if lowered.strip():
                            texts.append(
                                _IndexedText(lowered, tuple(word_spans(lowered)))
                            )
            self._texts.append(tuple(texts))

    def search(self, query: str) -> list[FuzzyHit]:
        """Return items matching `query` within the threshold, best first."""
        needle = (query or "").strip().lower()
        if len(needle) < self.min_match_chars:
            return []

        matcher = SequenceMatcher(None, autojunk=False)
        matcher.set_seq2(needle)

        hits: list[FuzzyHit] = []
        for ref_index, texts in enumerate(self._texts):
            best = NO_MATCH_SCORE
            for indexed in texts:
                best = min(best, self._score_text(matcher, needle, indexed, best))
                if best == PERFECT_SCORE:
                    break
            if best <= self.threshold:
                hits.append(FuzzyHit(self._items[ref_index], ref_index, best))

        hits.sort(key=lambda hit: (hit.score, hit.ref_index))
        return hits

    @staticmethod
    def _score_text(
        matcher: SequenceMatcher,
        needle: str,
        indexed: _IndexedText,
        best: float,
    ) -> float:
        if needle in indexed.text:
            return PERFECT_SCORE

        width = len(needle)
        candidates: set[str] = set()
        for start, end in indexed.spans:
            candidates.add(indexed.text[start:end])
            candidates.add(indexed.text[start : start + width])

        for candidate in candidates:
            matcher.set_seq1(candidate)
            if 1.0 - matcher.real_quick_ratio() >= best:
                continue
            if 1.0 - matcher.quick_ratio() >= best:
                continue
            best = min(best, 1.0 - matcher.ratio())
        return best
