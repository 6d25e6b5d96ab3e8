from __future__ import annotations

from datetime import datetime
from urllib.parse import urlparse

from stash.errors import ValidationFailure

NOTES_DOMAIN = "Notes"
UNKNOWN_DOMAIN = "unknown"


def clean_url(url: str | None) -> str | None:
    text = (url or "").strip()
    return text or None


def extract_domain(url: str | None) -> str:
    url = clean_url(url)
    if not url:
        return NOTES_DOMAIN
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return UNKNOWN_DOMAIN
    return hostname or UNKNOWN_DOMAIN


def generate_note_title(when: datetime) -> str:
    return f"{when:%b} {when.day}, {when:%Y}, {when:%I:%M %p}"


def split_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def require_url_or_notes(url: str | None, notes: str | None) -> None:
    if not clean_url(url) and not (notes or "").strip():
        raise ValidationFailure("Either URL or notes is required")
