"""Durable storage for the remote browser session identifier."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = Path.home() / ".cache" / "blinda" / "session_id"


class SessionStore(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, session_id: str) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStore:
    """Keeps the identifier for the lifetime of the process only."""

    def __init__(self, session_id: Optional[str] = None) -> None:
        self._session_id = session_id or None

    def get(self) -> Optional[str]:
        return self._session_id

    def set(self, session_id: str) -> None:
        self._session_id = session_id or None

    def clear(self) -> None:
        self._session_id = None


class FileSessionStore:
    """Persist the identifier in a small file so it survives restarts."""

    def __init__(self, path: Path = DEFAULT_SESSION_FILE) -> None:
        self.path = Path(path)

    def get(self) -> Optional[str]:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read session file %s: %s", self.path, exc)
            return None
        return value or None

    def set(self, session_id: str) -> None:
        if not session_id:
            self.clear()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(session_id, encoding="utf-8")
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


__all__ = [
    "DEFAULT_SESSION_FILE",
    "FileSessionStore",
    "MemorySessionStore",
    "SessionStore",
]
