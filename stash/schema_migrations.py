from __future__ import annotations

from sqlalchemy import inspect, text

from stash.extensions import db
from stash.models import User


def migrate_add_user_id_column() -> bool:
    """Attach rows of a legacy single-user bookmarks table to the first user."""
    engine = db.engine
    if engine.dialect.name != "sqlite":
        return False

    inspector = inspect(engine)
    if not inspector.has_table("bookmarks"):
        return False

    columns = {column["name"] for column in inspector.get_columns("bookmarks")}
    if "user_id" in columns:
        return False

    owner = User.query.order_by(User.id.asc()).first()
    if owner is None:
        return False

    db.session.execute(
        text("ALTER TABLE bookmarks ADD COLUMN user_id INTEGER REFERENCES users(id)")
    )
    db.session.execute(
        text("UPDATE bookmarks SET user_id = :user_id WHERE user_id IS NULL"),
        {"user_id": owner.id},
    )
    db.session.execute(
        text(
            """
            UPDATE bookmarks
            SET domain = 'Notes'
            WHERE (url IS NULL OR TRIM(url) = '')
              AND (domain IS NULL OR TRIM(domain) = '')
            """
        )
    )
    db.session.commit()
    return True
