"""Accessors for the adapters created in the application lifespan."""

from __future__ import annotations

from fastapi import Request

from ..orchestrator import CommandOrchestrator
from ..services import BrowserSessionService, SpeechToTextService, TextToSpeechService


def get_orchestrator(request: Request) -> CommandOrchestrator:
    return request.app.state.command_orchestrator


def get_browser_service(request: Request) -> BrowserSessionService:
    return request.app.state.browser_service


def get_stt_service(request: Request) -> SpeechToTextService:
    return request.app.state.stt_service


def get_tts_service(request: Request) -> TextToSpeechService:
    return request.app.state.tts_service


__all__ = [
    "get_browser_service",
    "get_orchestrator",
    "get_stt_service",
    "get_tts_service",
]
