"""Application factory for the FastAPI service."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import PROJECT_ROOT, Settings, get_settings
from .error_handlers import register_error_handlers
from .logging_handlers import DateStampedFileHandler, cleanup_old_logs
from .logging_settings import parse_logging_settings
from .openrouter import OpenRouterClient
from .orchestrator import CommandOrchestrator
from .routers.browse import router as browse_router
from .routers.commands import SESSION_HEADER
from .routers.commands import router as commands_router
from .routers.speech import router as speech_router
from .services import (
    BrowserSessionService,
    NarrationService,
    SpeechToTextService,
    TextToSpeechService,
)

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_path(p: Path) -> Path:
    return p if p.is_absolute() else PROJECT_ROOT / p


def _configure_logging(settings: Settings) -> None:
    """Configure logging from LOG_LEVEL and the optional logging settings file."""
    # Load .env file first to ensure LOG_LEVEL is available
    load_dotenv()

    log_settings = parse_logging_settings(
        _resolve_path(settings.logging_settings_path),
        terminal_default=os.getenv("LOG_LEVEL", "INFO"),
    )

    handlers: list[logging.Handler] = []
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    if log_settings.terminal_level is not None:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_settings.terminal_level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    log_dir = _resolve_path(settings.log_dir)
    if log_settings.file_level is not None:
        file_handler = DateStampedFileHandler(log_dir, tz_name=log_settings.timezone)
        file_handler.setLevel(log_settings.file_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    active_levels = [handler.level for handler in handlers]
    root_level = min(active_levels) if active_levels else logging.WARNING

    logging.basicConfig(
        level=root_level,
        handlers=handlers or [logging.NullHandler()],
        force=True,  # Override any existing configuration
    )

    logging.getLogger("blinda").setLevel(root_level)
    logging.getLogger("uvicorn").setLevel(root_level)
    logging.getLogger("uvicorn.access").setLevel(root_level)
    logging.getLogger("uvicorn.error").setLevel(root_level)

    # Quiet noisy transport logs unless debugging
    transport_level = root_level if root_level <= logging.DEBUG else logging.WARNING
    logging.getLogger("httpx").setLevel(transport_level)
    logging.getLogger("httpcore").setLevel(transport_level)

    cleanup_old_logs([log_dir], log_settings.retention_hours, logger)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    # Configure logging first thing
    _configure_logging(settings)

    missing = settings.missing_credentials()
    for name in missing:
        logger.error(
            "%s environment variable not set; requests needing it will fail.", name
        )

    stt_service = SpeechToTextService(settings)
    tts_service = TextToSpeechService(settings)
    browser_service = BrowserSessionService(settings)
    openrouter_client = OpenRouterClient(settings)
    orchestrator = CommandOrchestrator(
        browser_service,
        NarrationService(openrouter_client),
        tts_service,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            for name, closer in (
                ("STT", stt_service.aclose),
                ("TTS", tts_service.aclose),
                ("Hyperbrowser", browser_service.aclose),
                ("OpenRouter", openrouter_client.aclose),
            ):
                # Bound shutdown time per client
                try:
                    await asyncio.wait_for(closer(), timeout=2.0)
                except (asyncio.TimeoutError, Exception) as exc:
                    logger.warning("Error closing %s client: %s", name, exc)

    app = FastAPI(
        title="Blinda Voice Browser",
        version="0.1.0",
        description="Voice-driven web browsing for blind and low-vision users.",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.stt_service = stt_service
    app.state.tts_service = tts_service
    app.state.browser_service = browser_service
    app.state.command_orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    register_error_handlers(app)

    app.include_router(commands_router)
    app.include_router(browse_router)
    app.include_router(speech_router)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, object]:
        return {
            "status": "ok" if not missing else "degraded",
            "default_model": settings.default_model,
            "missing_credentials": missing,
        }

    return app


__all__ = ["create_app"]
