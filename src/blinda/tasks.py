"""Derive browser-agent task descriptions from transcribed speech."""

from __future__ import annotations

from typing import Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)

NAVIGATE_PREFIX = "Navigate to "


def canonicalize_url(text: str) -> Optional[str]:
    """Return the canonical form of `text` if it is an absolute URL, else None.

    Canonicalization follows the WHATWG URL rules (lower-cased scheme and host,
    default path "/"), so applying it to its own output is a no-op.
    """

    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None
    try:
        url = _URL_ADAPTER.validate_python(candidate)
    except ValidationError:
        return None
    if not url.scheme or not url.host:
        return None
    return str(url)


def derive_task(transcribed_text: str) -> str:
    url = canonicalize_url(transcribed_text)
    if url is None:
        return transcribed_text
    return f"{NAVIGATE_PREFIX}{url}"


__all__ = ["NAVIGATE_PREFIX", "canonicalize_url", "derive_task"]
