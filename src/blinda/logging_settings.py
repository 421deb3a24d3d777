"""Helpers for parsing the simple logging settings file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

_LEVEL_MAP: dict[str, int | None] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": None,
}

_DEFAULT_LEVELS: dict[str, str] = {"terminal": "info", "file": "off"}
_DEFAULT_RETENTION_HOURS = 48
_DEFAULT_TIMEZONE = "UTC"


@dataclass(frozen=True)
class LoggingSettings:
    terminal_level: int | None
    file_level: int | None
    retention_hours: int
    timezone: str = _DEFAULT_TIMEZONE


def _normalize_level(value: str) -> str:
    return value.strip().lower()


def _resolve_level(key: str, value: str) -> int | None:
    normalized = _normalize_level(value)
    if normalized in _LEVEL_MAP:
        return _LEVEL_MAP[normalized]
    return _LEVEL_MAP[_DEFAULT_LEVELS[key]]


def parse_logging_settings(path: Path, *, terminal_default: str = "info") -> LoggingSettings:
    """Parse the human-readable logging settings file.

    Recognized keys: ``terminal``, ``file`` (debug/info/warning/error/off),
    ``retention_hours`` and ``timezone`` (IANA name used for log folder dates).
    """

    levels: dict[str, int | None] = {
        "terminal": _resolve_level("terminal", terminal_default),
        "file": _LEVEL_MAP[_DEFAULT_LEVELS["file"]],
    }
    retention_hours = _DEFAULT_RETENTION_HOURS
    timezone = _DEFAULT_TIMEZONE

    if path.exists():
        for raw_line in path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, value = (part.strip() for part in line.split("=", 1))
            normalized_key = key.lower()
            if normalized_key == "retention_hours":
                try:
                    retention_hours = max(0, int(value))
                except ValueError:
                    retention_hours = _DEFAULT_RETENTION_HOURS
            elif normalized_key == "timezone":
                timezone = value or _DEFAULT_TIMEZONE
            elif normalized_key in levels:
                levels[normalized_key] = _resolve_level(normalized_key, value)

    return LoggingSettings(
        terminal_level=levels["terminal"],
        file_level=levels["file"],
        retention_hours=retention_hours,
        timezone=timezone,
    )


__all__ = ["LoggingSettings", "parse_logging_settings"]
