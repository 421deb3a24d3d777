"""ElevenLabs text-to-speech adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import Settings
from ..errors import InvalidInput, UpstreamUnavailable
from ..provider_errors import error_detail

logger = logging.getLogger(__name__)

PROVIDER = "ElevenLabs TTS"

# Friendly names accepted in place of raw ElevenLabs voice ids.
VOICE_ALIASES = {
    "sarah": "EXAVITQu4vr4xnSDxMaL",
    "rachel": "21m00Tcm4TlvDq8ikWAM",
    "adam": "pNInz6obpgDQGcFmaJgB",
}

_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "pcm": "audio/pcm",
    "ulaw": "audio/basic",
    "opus": "audio/ogg",
}


@dataclass(frozen=True)
class SynthesizedSpeech:
    audio: bytes
    media_type: str = "audio/mpeg"

    def iter_chunks(self, chunk_size: int = 32 * 1024):
        for i in range(0, len(self.audio), chunk_size):
            yield self.audio[i:i + chunk_size]


def media_type_for(output_format: str) -> str:
    codec = output_format.split("_", 1)[0].lower()
    return _MEDIA_TYPES.get(codec, "application/octet-stream")


class TextToSpeechService:
    """
    Service for Text-to-Speech generation through ElevenLabs.

    The provider streams the body, but synthesize() reads it to completion before
    returning: a failure halfway through raises instead of producing truncated audio.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.tts_timeout, connect=10.0)
            )
            logger.info("Created httpx.AsyncClient for TTS")
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def resolve_voice(self, voice: Optional[str]) -> str:
        if not voice:
            return self._settings.tts_voice_id
        return VOICE_ALIASES.get(voice.strip().lower(), voice.strip())

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        model: Optional[str] = None,
    ) -> SynthesizedSpeech:
        """Synthesize `text` and return the complete encoded audio."""

        if not text or not text.strip():
            raise InvalidInput("No text provided for TTS.")

        api_key = self._settings.elevenlabs_api_key
        if api_key is None or not api_key.get_secret_value():
            raise UpstreamUnavailable(PROVIDER, "ELEVENLABS_API_KEY is not configured")

        voice_id = self.resolve_voice(voice)
        base_url = str(self._settings.elevenlabs_base_url).rstrip("/")
        url = f"{base_url}/text-to-speech/{voice_id}/stream"
        output_format = self._settings.tts_output_format
        payload = {
            "text": text,
            "model_id": model or self._settings.tts_model_id,
        }
        headers = {
            "xi-api-key": api_key.get_secret_value(),
            "Content-Type": "application/json",
            "Accept": media_type_for(output_format),
        }

        client = self._get_http_client()
        audio = bytearray()
        try:
            async with client.stream(
                "POST",
                url,
                params={"output_format": output_format},
                headers=headers,
                json=payload,
                timeout=self._settings.tts_timeout,
            ) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    raise UpstreamUnavailable(
                        PROVIDER,
                        error_detail(body),
                        status_code=response.status_code,
                    )
                async for chunk in response.aiter_bytes():
                    if chunk:
                        audio.extend(chunk)
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailable(
                PROVIDER, "speech synthesis timed out", timed_out=True
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(PROVIDER, str(exc)) from exc

        if not audio:
            raise UpstreamUnavailable(PROVIDER, "provider returned no audio")

        logger.info(
            "ElevenLabs TTS synthesized %d bytes for text: %s...",
            len(audio),
            text[:50],
        )
        return SynthesizedSpeech(bytes(audio), media_type_for(output_format))


__all__ = [
    "SynthesizedSpeech",
    "TextToSpeechService",
    "VOICE_ALIASES",
    "media_type_for",
]
