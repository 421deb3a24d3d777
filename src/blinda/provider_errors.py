"""Helpers shared by the provider adapters."""

from __future__ import annotations

import json
from typing import Any


def error_detail(raw: bytes) -> Any:
    """Extract the most useful error description from a provider response body."""

    if not raw:
        return "provider returned an empty error response"
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("utf-8", errors="ignore")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(payload, dict):
        for key in ("detail", "error", "message"):
            value = payload.get(key)
            if isinstance(value, dict):
                return value.get("message") or value
            if value:
                return value
        return payload
    return payload


__all__ = ["error_detail"]
