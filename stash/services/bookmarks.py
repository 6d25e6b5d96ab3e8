"""Server-side record store for bookmarks.

Every function is scoped to one owner. Titles and domains are derived here and
never accepted from callers: a bookmark with a url takes the page title, a
pure note takes a label built from its creation time.
"""
from __future__ import annotations

from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import or_

from stash.errors import NotFound
from stash.extensions import db
from stash.models import Bookmark, utcnow
from stash.services.common import (
    clean_url,
    extract_domain,
    generate_note_title,
    require_url_or_notes,
)
from stash.services.content import fetch_page_title


def _local_time(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone()


def derive_title(url: str | None, created_at: datetime) -> str:
    if url:
        return fetch_page_title(
            url,
            timeout=current_app.config["TITLE_FETCH_TIMEOUT"],
            max_bytes=current_app.config["TITLE_MAX_BYTES"],
            logger=current_app.logger,
        )
    return generate_note_title(_local_time(created_at))


def _newest_first(query):
    return query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())


def insert(user_id: int, url: str | None, notes: str | None, tags: str | None) -> Bookmark:
    require_url_or_notes(url, notes)
    url = clean_url(url)
    created_at = utcnow()
    bookmark = Bookmark(
        user_id=user_id,
        url=url,
        title=derive_title(url, created_at),
        notes=(notes or "").strip(),
        tags=(tags or "").strip(),
        domain=extract_domain(url),
        created_at=created_at,
    )
    db.session.add(bookmark)
    db.session.commit()
    return bookmark


def get(user_id: int, bookmark_id: int) -> Bookmark:
    bookmark = Bookmark.query.filter_by(id=bookmark_id, user_id=user_id).first()
    if not bookmark:
        raise NotFound("Bookmark not found")
    return bookmark


def update(
    user_id: int,
    bookmark_id: int,
    url: str | None,
    notes: str | None,
    tags: str | None,
) -> Bookmark:
    require_url_or_notes(url, notes)
    bookmark = get(user_id, bookmark_id)
    url = clean_url(url)
    bookmark.url = url
    bookmark.title = derive_title(url, bookmark.created_at)
    bookmark.notes = (notes or "").strip()
    bookmark.tags = (tags or "").strip()
    bookmark.domain = extract_domain(url)
    db.session.commit()
    return bookmark


def delete(user_id: int, bookmark_id: int) -> bool:
    bookmark = Bookmark.query.filter_by(id=bookmark_id, user_id=user_id).first()
    if not bookmark:
        return False
    db.session.delete(bookmark)
    db.session.commit()
    return True


def list_newest_first(user_id: int, limit: int | None = None) -> list[Bookmark]:
    query = _newest_first(Bookmark.query.filter_by(user_id=user_id))
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def list_all(user_id: int) -> list[Bookmark]:
    return list_newest_first(user_id)


def search_substring(user_id: int, term: str) -> list[Bookmark]:
    term = (term or "").strip()
    if not term:
        return list_all(user_id)
    query = Bookmark.query.filter_by(user_id=user_id).filter(
        or_(
            Bookmark.title.contains(term, autoescape=True),
            Bookmark.url.contains(term, autoescape=True),
            Bookmark.notes.contains(term, autoescape=True),
            Bookmark.tags.contains(term, autoescape=True),
        )
    )
    return _newest_first(query).all()


def group_by_domain(bookmarks) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = {}
    for bookmark in bookmarks:
        grouped.setdefault(bookmark.domain, []).append(bookmark.as_dict())
    return grouped
