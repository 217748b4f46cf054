"""Shared helpers used by the gate workflow (URLs, hashing, event loop)."""

from __future__ import annotations

import asyncio
import hashlib
from typing import Any, Coroutine, List, Optional
from urllib.parse import parse_qs, quote, urlsplit, urlunsplit

from .gate_errors import InvalidUrl

_HTTP_SCHEMES = {"http", "https"}


def is_http_url(url: str) -> bool:
    """Return True when ``url`` parses as an absolute http(s) URL with a host."""

    try:
        parts = urlsplit((url or "").strip())
        host = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in _HTTP_SCHEMES and bool(host)


def require_http_url(url: str) -> str:
    """Return the stripped URL or raise :class:`InvalidUrl`."""

    candidate = (url or "").strip()
    if not candidate or any(ch.isspace() for ch in candidate) or not is_http_url(candidate):
        raise InvalidUrl(candidate)
    return candidate


def with_query_param(url: str, name: str, value: str) -> str:
    """Set ``name=value`` on the URL query, replacing any existing ``name``.

    Other query pairs are kept verbatim and in order; the new pair goes last.
    """

    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidUrl(str(exc)) from exc
    pairs: List[str] = [pair for pair in parts.query.split("&") if pair]
    kept = [pair for pair in pairs if pair.split("=", 1)[0] != name]
    kept.append(f"{name}={quote(value, safe='')}")
    return urlunsplit(parts._replace(query="&".join(kept)))


def extract_query_param(url: str, name: str) -> Optional[str]:
    """Return the first non-empty value of ``name`` in the URL query."""

    try:
        query = urlsplit(url or "").query
    except ValueError:
        return None
    values = parse_qs(query, keep_blank_values=True).get(name) or []
    for value in values:
        if value:
            return value
    return None


def stable_url_hash(url: str) -> str:
    """64-bit blake2b hex digest; deterministic across runs and interpreters."""

    return hashlib.blake2b((url or "").encode("utf-8"), digest_size=8).hexdigest()


# ---------------- Single event loop helper for blocking callers ------------------
_GATE_LOOP: asyncio.AbstractEventLoop | None = None


def run_in_gate_loop(coro: Coroutine[Any, Any, Any]) -> Any:
    """Drive ``coro`` to completion on a module-owned event loop."""

    global _GATE_LOOP
    if _GATE_LOOP is None or _GATE_LOOP.is_closed():
        _GATE_LOOP = asyncio.new_event_loop()
    return _GATE_LOOP.run_until_complete(coro)


def sanity_check() -> None:
    assert is_http_url("https://example.com/a?b=1")
    assert not is_http_url("ftp://example.com")
    assert with_query_param("https://example.com", "pathid", "abc") == "https://example.com?pathid=abc"
    assert with_query_param("https://e.com/p?a=1&push_id=x", "push_id", "y") == "https://e.com/p?a=1&push_id=y"
    assert extract_query_param("https://e.com/?pathid=abc", "pathid") == "abc"
    assert extract_query_param("https://e.com/?pathid=", "pathid") is None
    assert len(stable_url_hash("https://example.com")) == 16


sanity_check()

__all__ = [
    "is_http_url",
    "require_http_url",
    "with_query_param",
    "extract_query_param",
    "stable_url_hash",
    "run_in_gate_loop",
    "sanity_check",
]
