from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from dateutil import parser as dt_parser

from stash.services.common import extract_domain, split_tags


@dataclass(frozen=True)
class BookmarkRecord:
    id: int
    title: str
    domain: str
    url: str | None = None
    notes: str = ""
    tags: str = ""
    created_at: datetime | None = None

    @property
    def is_note(self) -> bool:
        return not (self.url or "").strip()

    @property
    def tag_list(self) -> list[str]:
        return split_tags(self.tags)

    @classmethod
    def from_dict(cls, payload: dict) -> "BookmarkRecord":
        url = payload.get("url") or None
        return cls(
            id=int(payload["id"]),
            url=url,
            title=payload.get("title") or url or "",
            notes=payload.get("notes") or "",
            tags=payload.get("tags") or "",
            domain=payload.get("domain") or extract_domain(url),
            created_at=_parse_timestamp(
                payload.get("created_at") or payload.get("createdAt")
            ),
        )


def _parse_timestamp(value) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = dt_parser.parse(str(value))
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def preview_domain(url: str | None) -> str:
    """Domain a record would be filed under once saved with ``url``."""
    return extract_domain(url)
