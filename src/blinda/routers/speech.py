"""Standalone transcription and synthesis endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from ..error_handlers import error_context
from ..schemas.commands import SpeechRequest, TranscriptionResponse
from ..services import SpeechToTextService, TextToSpeechService
from .dependencies import get_stt_service, get_tts_service

router = APIRouter(prefix="/api", tags=["speech"])


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    response_model_by_alias=True,
    dependencies=[Depends(error_context("Error transcribing audio"))],
)
async def transcribe(
    audio: Optional[UploadFile] = File(default=None),
    stt: SpeechToTextService = Depends(get_stt_service),
) -> TranscriptionResponse:
    data = await audio.read() if audio is not None else b""
    transcription = await stt.transcribe(
        data,
        filename=(audio.filename if audio is not None else None) or "recording.wav",
        content_type=(audio.content_type if audio is not None else None)
        or "audio/wav",
    )
    return TranscriptionResponse(
        text=transcription.text,
        language_code=transcription.language_code,
        words=transcription.words,
        speakers=transcription.speakers,
    )


@router.post(
    "/tts",
    response_class=Response,
    dependencies=[Depends(error_context("Error generating speech"))],
)
async def text_to_speech(
    payload: SpeechRequest,
    tts: TextToSpeechService = Depends(get_tts_service),
) -> Response:
    speech = await tts.synthesize(payload.text or "", payload.voice_id, payload.model_id)
    return Response(content=speech.audio, media_type=speech.media_type)


__all__ = ["router"]
