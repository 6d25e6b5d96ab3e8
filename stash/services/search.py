from __future__ import annotations

from dataclasses import dataclass

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

SEARCH_FIELDS = ("title", "url", "notes", "tags")
DEFAULT_THRESHOLD = 0.3
# characters into a field after which a match costs a full point
MATCH_DISTANCE = 100


def _safe(value: str | None) -> str:
    return default_process(value or "")


def _field_dissimilarity(query: str, text: str, cutoff: float) -> float:
    """0 for an exact match at the start of ``text``, 1 for no match.

    Matches further into the field are penalised by their offset over
    ``MATCH_DISTANCE``.
    """
    if not text:
        return 1.0
    if len(text) < len(query):
        return 1.0 - fuzz.ratio(query, text, score_cutoff=cutoff) / 100
    alignment = fuzz.partial_ratio_alignment(query, text, score_cutoff=cutoff)
    if alignment is None or not alignment.score:
        return 1.0
    offset = alignment.dest_start / MATCH_DISTANCE
    return min(1.0, 1.0 - alignment.score / 100 + offset)


@dataclass(frozen=True)
class _Entry:
    record: object
    fields: tuple[str, ...]


class FuzzyIndex:
    """Typo-tolerant index over a fixed snapshot of bookmark records.

    A record's score is the dissimilarity (0 is a perfect match, 1 no match)
    of its best matching field. Records scoring above ``threshold`` are not
    returned. The index is never patched: build a new one when the snapshot
    changes.
    """

    def __init__(self, entries: tuple[_Entry, ...], threshold: float):
        self._entries = entries
        self.threshold = threshold

    def __len__(self) -> int:
        return len(self._entries)

    def score(self, entry: _Entry, query: str) -> float:
        cutoff = (1.0 - self.threshold) * 100
        best = min(
            (_field_dissimilarity(query, text, cutoff) for text in entry.fields),
            default=1.0,
        )
        return round(best, 6)

    def search_with_scores(self, query: str) -> list[tuple[object, float]]:
        q = _safe(query)
        if not q:
            return []

        ranked = []
        for position, entry in enumerate(self._entries):
            score = self.score(entry, q)
            if score <= self.threshold:
                ranked.append((score, position, entry.record))

        ranked.sort(key=lambda item: (item[0], item[1]))
        return [(record, score) for score, _, record in ranked]

    def search(self, query: str) -> list:
        return [record for record, _ in self.search_with_scores(query)]


def build_index(records, threshold: float = DEFAULT_THRESHOLD) -> FuzzyIndex:
    entries = tuple(
        _Entry(
            record=record,
            fields=tuple(_safe(getattr(record, name, "")) for name in SEARCH_FIELDS),
        )
        for record in records
    )
    return FuzzyIndex(entries, threshold=threshold)
