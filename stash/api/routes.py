from __future__ import annotations

from flask import g, jsonify, request

from stash.api import api_bp
from stash.errors import NotFound, ValidationFailure
from stash.services import bookmarks as store
from stash.services.security import api_auth_required, authenticate, issue_token

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _to_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _bookmark_fields(payload: dict) -> tuple[str | None, str, str]:
    url = payload.get("url")
    notes = payload.get("notes") or ""
    tags = payload.get("tags") or ""
    return (str(url) if url else None), str(notes), str(tags)


@api_bp.after_request
def add_cors_headers(response):
    for header, value in CORS_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@api_bp.errorhandler(ValidationFailure)
def handle_validation_failure(exc):
    return jsonify({"error": str(exc)}), 400


@api_bp.errorhandler(NotFound)
def handle_not_found(exc):
    return jsonify({"error": str(exc)}), 404


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "service": "Stash"})


@api_bp.route("/auth/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True) or {}
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""
    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    user = authenticate(username, password)
    if not user:
        return jsonify({"error": "Invalid credentials"}), 401

    return jsonify(
        {
            "token": issue_token(user),
            "user": user.as_dict(),
            "message": "Login successful",
        }
    )


@api_bp.route("/auth/verify", methods=["GET"])
@api_auth_required
def verify():
    return jsonify({"authenticated": True, "user": g.api_user.as_dict()})


@api_bp.route("/bookmarks", methods=["GET"])
@api_auth_required
def bookmarks_list():
    user = g.api_user
    search = (request.args.get("search") or "").strip()
    limit = request.args.get("limit", type=int)
    if search:
        items = store.search_substring(user.id, search)
    elif _to_bool(request.args.get("all")) or limit is None or limit < 0:
        items = store.list_all(user.id)
    else:
        items = store.list_newest_first(user.id, limit=limit)

    if _to_bool(request.args.get("grouped")):
        return jsonify(store.group_by_domain(items))
    return jsonify({"items": [item.as_dict() for item in items]})


@api_bp.route("/bookmarks", methods=["POST"])
@api_auth_required
def bookmarks_create():
    user = g.api_user
    url, notes, tags = _bookmark_fields(request.get_json(silent=True) or {})
    bookmark = store.insert(user.id, url, notes, tags)
    return jsonify(bookmark.as_dict()), 201


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def bookmarks_get(bookmark_id: int):
    user = g.api_user
    return jsonify(store.get(user.id, bookmark_id).as_dict())


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["PUT"])
@api_auth_required
def bookmarks_update(bookmark_id: int):
    user = g.api_user
    url, notes, tags = _bookmark_fields(request.get_json(silent=True) or {})
    bookmark = store.update(user.id, bookmark_id, url, notes, tags)
    return jsonify(bookmark.as_dict())


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["DELETE"])
@api_auth_required
def bookmarks_delete(bookmark_id: int):
    user = g.api_user
    if not store.delete(user.id, bookmark_id):
        return jsonify({"error": "Bookmark not found"}), 404
    return jsonify({"success": True, "message": "Bookmark deleted successfully"})
