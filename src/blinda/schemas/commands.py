"""Pydantic models for the voice command endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProcessCommandRequest(BaseModel):
    """Transcribed speech plus the caller's current browser session, if any."""

    transcribed_text: Optional[str] = Field(default=None, alias="transcribedText")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    model_config = ConfigDict(populate_by_name=True)


class BrowseRequest(BaseModel):
    task_description: Optional[str] = Field(default=None, alias="taskDescription")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    model_config = ConfigDict(populate_by_name=True)


class SpeechRequest(BaseModel):
    text: Optional[str] = None
    voice_id: Optional[str] = Field(default=None, alias="voiceId")
    model_id: Optional[str] = Field(default=None, alias="modelId")

    model_config = ConfigDict(populate_by_name=True)


class TranscriptionResponse(BaseModel):
    text: str
    language_code: Optional[str] = Field(default=None, alias="languageCode")
    words: List[Dict[str, Any]] = Field(default_factory=list)
    speakers: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    message: str
    error: str


__all__ = [
    "BrowseRequest",
    "ErrorResponse",
    "ProcessCommandRequest",
    "SpeechRequest",
    "TranscriptionResponse",
]
