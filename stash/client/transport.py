from __future__ import annotations

import httpx

from stash.client.records import BookmarkRecord
from stash.config import ClientConfig
from stash.errors import (
    NotFound,
    TransientFetchFailure,
    Unauthorized,
    ValidationFailure,
)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"HTTP {response.status_code}"


class StashClient:
    """Record store backed by the Stash REST API."""

    def __init__(
        self,
        base_url: str = ClientConfig.STASH_URL,
        token: str | None = None,
        timeout: float = ClientConfig.REQUEST_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = token
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(
                method, f"/api{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            raise TransientFetchFailure(str(exc) or exc.__class__.__name__) from exc

        if response.status_code == 401:
            raise Unauthorized(_error_message(response))
        if response.status_code == 404:
            raise NotFound(_error_message(response))
        if response.status_code == 400:
            raise ValidationFailure(_error_message(response))
        if response.status_code >= 400:
            raise TransientFetchFailure(_error_message(response))
        return response

    def _records(self, params: dict) -> list[BookmarkRecord]:
        payload = self._request("GET", "/bookmarks", params=params).json()
        return [BookmarkRecord.from_dict(item) for item in payload.get("items", [])]

    def login(self, username: str, password: str) -> str:
        try:
            payload = self._request(
                "POST",
                "/auth/login",
                json={"username": username, "password": password},
            ).json()
        except ValidationFailure as exc:
            raise Unauthorized(str(exc)) from exc
        self.token = payload["token"]
        return self.token

    def verify(self) -> dict:
        return self._request("GET", "/auth/verify").json()["user"]

    def list_newest_first(self, limit: int | None = None) -> list[BookmarkRecord]:
        if limit is None:
            return self.list_all()
        return self._records({"limit": limit})

    def list_all(self) -> list[BookmarkRecord]:
        return self._records({"all": "true"})

    def search_substring(self, term: str) -> list[BookmarkRecord]:
        return self._records({"search": term})

    def get(self, bookmark_id: int) -> BookmarkRecord:
        payload = self._request("GET", f"/bookmarks/{bookmark_id}").json()
        return BookmarkRecord.from_dict(payload)

    def insert(self, url: str | None, notes: str, tags: str) -> BookmarkRecord:
        payload = self._request(
            "POST",
            "/bookmarks",
            json={"url": url, "notes": notes, "tags": tags},
        ).json()
        return BookmarkRecord.from_dict(payload)

    def update(
        self, bookmark_id: int, url: str | None, notes: str, tags: str
    ) -> BookmarkRecord:
        payload = self._request(
            "PUT",
            f"/bookmarks/{bookmark_id}",
            json={"url": url, "notes": notes, "tags": tags},
        ).json()
        return BookmarkRecord.from_dict(payload)

    def delete(self, bookmark_id: int) -> bool:
        try:
            self._request("DELETE", f"/bookmarks/{bookmark_id}")
        except NotFound:
            return False
        return True
