from __future__ import annotations

from functools import wraps

from flask import current_app, g, jsonify, request
from itsdangerous import BadData, URLSafeTimedSerializer

from stash.errors import Unauthorized
from stash.extensions import db
from stash.models import User


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=secret_key, salt="stash-api-token")


def issue_token(user: User) -> str:
    serializer = _serializer(current_app.config["SECRET_KEY"])
    return serializer.dumps({"user_id": user.id, "username": user.username})


def verify_token(token: str) -> User:
    serializer = _serializer(current_app.config["SECRET_KEY"])
    try:
        payload = serializer.loads(
            token, max_age=current_app.config["TOKEN_TTL_SECONDS"]
        )
    except BadData as exc:
        raise Unauthorized("Invalid token") from exc

    user = db.session.get(User, payload.get("user_id"))
    if not user or not user.is_active or user.username != payload.get("username"):
        raise Unauthorized("Invalid token")
    return user


def authenticate(username: str, password: str) -> User | None:
    user = User.query.filter_by(username=username).first()
    if not user or not user.is_active or not user.check_password(password):
        return None
    return user


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header.removeprefix("Bearer ").strip() or None


def api_auth_required(func):
    @wraps(func)
    def wrapped(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Unauthorized"}), 401
        try:
            g.api_user = verify_token(token)
        except Unauthorized:
            return jsonify({"error": "Unauthorized"}), 401
        return func(*args, **kwargs)

    return wrapped


def ensure_admin_user(username: str, password: str) -> User | None:
    if User.query.count() > 0:
        return None
    if not username or not password:
        return None
    admin = User(username=username, is_active=True)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    return admin
