"""Command pipeline: transcript -> browser task -> narration -> speech."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from .errors import InvalidInput
from .services.browser_service import BrowserTaskResult
from .services.tts_service import SynthesizedSpeech
from .tasks import derive_task

logger = logging.getLogger(__name__)

NARRATION_SYSTEM_PROMPT = (
    "You are an AI assistant that helps blind users understand web pages. "
    "Describe the key elements and available actions on the page based on the "
    "provided technical output from a browser agent. Be concise and focus on "
    "interactive elements. End your response by asking the user what they want "
    "to do next."
)
FALLBACK_NARRATION = "Could not interpret the page."


class BrowserAdapter(Protocol):
    async def execute(
        self, task: str, session_id: Optional[str] = None
    ) -> BrowserTaskResult: ...


class TextGenerationAdapter(Protocol):
    async def summarize(self, system_prompt: str, user_context: str) -> str: ...


class SpeechAdapter(Protocol):
    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        model: Optional[str] = None,
    ) -> SynthesizedSpeech: ...


@dataclass(frozen=True)
class CommandResult:
    """Synthesized narration plus the session id to hand back to the caller."""

    speech: SynthesizedSpeech
    session_id: str
    task: str
    narration: str

    @property
    def audio(self) -> bytes:
        return self.speech.audio

    @property
    def media_type(self) -> str:
        return self.speech.media_type


def build_narration_context(transcribed_text: str, page_state: dict[str, Any]) -> str:
    serialized = json.dumps(page_state, indent=2, ensure_ascii=False, default=str)
    return f'Browser state after executing task "{transcribed_text}":\n\n{serialized}'


class CommandOrchestrator:
    """Drive one request through the browser, language-model and speech adapters.

    Holds no per-session state: the session id arrives with each call and the
    effective one is returned, so instances can be shared across requests.
    Adapter failures propagate unchanged and abort the remaining steps.
    """

    def __init__(
        self,
        browser: BrowserAdapter,
        narrator: TextGenerationAdapter,
        speech: SpeechAdapter,
        *,
        voice: Optional[str] = None,
        speech_model: Optional[str] = None,
    ):
        self._browser = browser
        self._narrator = narrator
        self._speech = speech
        self._voice = voice
        self._speech_model = speech_model

    async def process(
        self, transcribed_text: str, session_id: Optional[str] = None
    ) -> CommandResult:
        if not transcribed_text or not transcribed_text.strip():
            raise InvalidInput("No transcribed text provided.")

        logger.info(
            'Received transcribed text: "%s" for session: %s',
            transcribed_text,
            session_id,
        )

        task = derive_task(transcribed_text)
        if task == transcribed_text:
            logger.info("Transcribed text is not a URL, using as direct task.")
        logger.info("Running browser task %r (session: %s)", task, session_id)

        result = await self._browser.execute(task, session_id or None)
        effective_session_id = result.session_id

        narration = await self._narrator.summarize(
            NARRATION_SYSTEM_PROMPT,
            build_narration_context(transcribed_text, result.as_payload()),
        )
        if not narration or not narration.strip():
            logger.warning("Language model returned no narration, using fallback")
            narration = FALLBACK_NARRATION
        logger.info('Generated user-friendly text: "%s"', narration)

        speech = await self._speech.synthesize(
            narration, self._voice, self._speech_model
        )
        logger.info(
            "Returning %d bytes of audio with session ID: %s",
            len(speech.audio),
            effective_session_id,
        )
        return CommandResult(
            speech=speech,
            session_id=effective_session_id,
            task=task,
            narration=narration,
        )


__all__ = [
    "CommandOrchestrator",
    "CommandResult",
    "FALLBACK_NARRATION",
    "NARRATION_SYSTEM_PROMPT",
    "build_narration_context",
]
