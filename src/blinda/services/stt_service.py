"""ElevenLabs Scribe speech-to-text adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ..config import Settings
from ..errors import InvalidInput, UpstreamUnavailable
from ..provider_errors import error_detail

logger = logging.getLogger(__name__)

PROVIDER = "ElevenLabs STT"


@dataclass
class Transcription:
    """Recognized text plus the optional word/speaker metadata."""

    text: str
    language_code: Optional[str] = None
    words: list[dict[str, Any]] = field(default_factory=list)

    @property
    def speakers(self) -> list[str]:
        seen: list[str] = []
        for word in self.words:
            speaker = word.get("speaker_id")
            if isinstance(speaker, str) and speaker not in seen:
                seen.append(speaker)
        return seen


class SpeechToTextService:
    """Convert recorded audio into text with speaker diarization enabled."""

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def _url(self) -> str:
        return f"{str(self._settings.elevenlabs_base_url).rstrip('/')}/speech-to-text"

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.stt_timeout, connect=10.0)
            )
            logger.info("Created httpx.AsyncClient for STT")
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def transcribe(
        self,
        audio: Optional[bytes],
        *,
        filename: str = "recording.wav",
        content_type: str = "audio/wav",
    ) -> Transcription:
        if not audio:
            raise InvalidInput("No audio file provided.")

        api_key = self._settings.elevenlabs_api_key
        if api_key is None or not api_key.get_secret_value():
            raise UpstreamUnavailable(PROVIDER, "ELEVENLABS_API_KEY is not configured")

        data: dict[str, str] = {
            "model_id": self._settings.stt_model,
            "diarize": "true",
        }
        if self._settings.stt_tag_audio_events:
            data["tag_audio_events"] = "true"
        if self._settings.stt_language_code:
            data["language_code"] = self._settings.stt_language_code

        logger.info("Transcribing %d bytes of audio", len(audio))
        client = self._get_http_client()
        try:
            response = await client.post(
                self._url,
                headers={"xi-api-key": api_key.get_secret_value()},
                data=data,
                files={"file": (filename, audio, content_type)},
                timeout=self._settings.stt_timeout,
            )
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(
                PROVIDER, "transcription timed out", timed_out=True
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(PROVIDER, str(exc)) from exc

        if response.status_code >= 400:
            raise UpstreamUnavailable(
                PROVIDER,
                error_detail(response.content),
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamUnavailable(PROVIDER, "response was not JSON") from exc

        words = body.get("words") if isinstance(body.get("words"), list) else []
        transcription = Transcription(
            text=str(body.get("text") or "").strip(),
            language_code=body.get("language_code"),
            words=[word for word in words if isinstance(word, dict)],
        )
        logger.info(
            "Transcribed %d chars (%d speaker(s))",
            len(transcription.text),
            len(transcription.speakers),
        )
        return transcription


__all__ = ["SpeechToTextService", "Transcription"]
