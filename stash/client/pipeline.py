from __future__ import annotations

from stash.services.search import DEFAULT_THRESHOLD, FuzzyIndex, build_index


def is_blank(query: str | None) -> bool:
    return not (query or "").strip()


def apply_notes_only(records, notes_only: bool) -> list:
    if not notes_only:
        return list(records)
    return [record for record in records if not (record.url or "").strip()]


def filter_records(
    superset,
    query: str | None,
    notes_only: bool = False,
    index: FuzzyIndex | None = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> list:
    """Records to display for ``query`` and the notes-only predicate.

    A blank query keeps the superset's recency order; a search returns the
    fuzzy matches in relevance order.
    """
    if is_blank(query):
        candidates = list(superset)
    else:
        if index is None:
            index = build_index(superset, threshold=threshold)
        candidates = index.search(query)
    return apply_notes_only(candidates, notes_only)


def group_by_domain(records) -> dict[str, list]:
    grouped: dict[str, list] = {}
    for record in records:
        grouped.setdefault(record.domain, []).append(record)
    return {domain: grouped[domain] for domain in sorted(grouped)}
