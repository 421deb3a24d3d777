"""Provider adapters used by the command pipeline."""

from .browser_service import BrowserSessionService, BrowserTaskResult
from .narration_service import NarrationService
from .stt_service import SpeechToTextService, Transcription
from .tts_service import SynthesizedSpeech, TextToSpeechService

__all__ = [
    "BrowserSessionService",
    "BrowserTaskResult",
    "NarrationService",
    "SpeechToTextService",
    "SynthesizedSpeech",
    "TextToSpeechService",
    "Transcription",
]
