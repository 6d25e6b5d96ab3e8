from __future__ import annotations

import warnings

import httpx
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning


DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; StashBot/1.0)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def _normalize_error(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def fetch_html(url: str, timeout: float, max_bytes: int) -> str:
    with httpx.Client(
        follow_redirects=True, timeout=timeout, headers=DEFAULT_HEADERS
    ) as client:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            chunks = []
            total = 0
            for chunk in response.iter_bytes():
                total += len(chunk)
                if total > max_bytes:
                    break
                chunks.append(chunk)
            data = b"".join(chunks)
            encoding = response.encoding or "utf-8"
            return data.decode(encoding, errors="ignore")


def _build_soup(html: str) -> BeautifulSoup:
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
        return BeautifulSoup(html, "lxml")


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if not tag:
        return ""
    return (tag.get("content") or "").strip()


def extract_title(html: str) -> str | None:
    soup = _build_soup(html)
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
        if title:
            return title
    title = _meta_content(soup, property="og:title") or _meta_content(
        soup, name="title"
    )
    return title or None


def fetch_page_title(url: str, timeout: float, max_bytes: int, logger=None) -> str:
    """Return the page title for ``url``, falling back to the url itself."""
    try:
        html = fetch_html(url, timeout=timeout, max_bytes=max_bytes)
    except Exception as exc:
        if logger is not None:
            logger.warning("Error extracting title for %s: %s", url, _normalize_error(exc))
        return url
    return extract_title(html) or url
