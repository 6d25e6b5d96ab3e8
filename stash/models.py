from datetime import datetime, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from stash.extensions import db
from stash.services.common import NOTES_DOMAIN


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    bookmarks = db.relationship("Bookmark", backref="user", lazy=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def as_dict(self):
        return {"id": self.id, "username": self.username}


class Bookmark(db.Model):
    __tablename__ = "bookmarks"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )

    url = db.Column(db.Text, nullable=True)
    title = db.Column(db.String(512), nullable=False)
    notes = db.Column(db.Text, nullable=False, default="")
    tags = db.Column(db.Text, nullable=False, default="")
    domain = db.Column(db.String(255), nullable=False, default=NOTES_DOMAIN)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (db.Index("ix_bookmark_user_created", "user_id", "created_at"),)

    def as_dict(self):
        created_at = self.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops tzinfo on read
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "notes": self.notes or "",
            "tags": self.tags or "",
            "domain": self.domain,
            "created_at": created_at.isoformat() if created_at else None,
        }
