"""Recording / playback state machine driving one voice command at a time."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional, Protocol

from .api import BackendError, CommandReply
from .audio import RecorderError
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    ORCHESTRATING = "orchestrating"
    PLAYING = "playing"


class Backend(Protocol):
    async def transcribe(self, wav_audio: bytes) -> str: ...

    async def process_command(
        self, transcribed_text: str, session_id: Optional[str]
    ) -> CommandReply: ...


class Recorder(Protocol):
    def start(self) -> None: ...

    def stop(self) -> bytes: ...


class Player(Protocol):
    async def play(self, audio: bytes, media_type: str = "audio/mpeg") -> None: ...

    async def stop(self) -> None: ...


_BUSY_STATES = {ControllerState.TRANSCRIBING, ControllerState.ORCHESTRATING}


class ClientController:
    """Client side of the pipeline.

    Owns the microphone, the single playback stream and the persisted session
    id. Only one command is in flight at a time, so two tasks never race on the
    same remote browser session.
    """

    def __init__(
        self,
        backend: Backend,
        recorder: Recorder,
        player: Player,
        sessions: SessionStore,
        *,
        on_state_change: Optional[Callable[[ControllerState], None]] = None,
        on_transcript: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self._backend = backend
        self._recorder = recorder
        self._player = player
        self._sessions = sessions
        self._on_state_change = on_state_change
        self._on_transcript = on_transcript
        self._on_error = on_error
        self._state = ControllerState.IDLE
        self._playback: Optional[asyncio.Task[None]] = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def session_id(self) -> Optional[str]:
        return self._sessions.get()

    def _set_state(self, state: ControllerState) -> None:
        if state is self._state:
            return
        logger.debug("State %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state_change:
            self._on_state_change(state)

    def _fail(self, exc: Exception) -> None:
        logger.error("Voice command failed: %s", exc)
        self._set_state(ControllerState.IDLE)
        if self._on_error:
            self._on_error(exc)

    async def start_recording(self) -> bool:
        """Begin capturing audio, interrupting playback first. False if refused."""

        if self._state is ControllerState.RECORDING:
            return False
        if self._state in _BUSY_STATES:
            logger.info("Ignoring start while a command is %s", self._state.value)
            return False
        if self._state is ControllerState.PLAYING:
            await self.interrupt()

        try:
            self._recorder.start()
        except RecorderError as exc:
            self._fail(exc)
            return False
        self._set_state(ControllerState.RECORDING)
        return True

    async def stop_recording(self) -> None:
        """Finish the take and run it through transcription and orchestration."""

        if self._state is not ControllerState.RECORDING:
            return
        try:
            audio = self._recorder.stop()
        except Exception as exc:
            self._fail(exc)
            return
        await self._run_cycle(audio)

    async def _run_cycle(self, audio: bytes) -> None:
        try:
            self._set_state(ControllerState.TRANSCRIBING)
            text = await self._backend.transcribe(audio)
            if not text:
                raise BackendError(None, "Nothing was heard", "empty transcription")
            if self._on_transcript:
                self._on_transcript(text)

            self._set_state(ControllerState.ORCHESTRATING)
            reply = await self._backend.process_command(text, self._sessions.get())
            if reply.session_id:
                self._sessions.set(reply.session_id)
        except Exception as exc:
            if isinstance(exc, BackendError) and exc.session_expired:
                logger.info("Browser session expired; the next command starts a new one")
                self._clear_session()
            self._fail(exc)
            return

        self._start_playback(reply)

    def _clear_session(self) -> None:
        try:
            self._sessions.clear()
        except OSError as exc:
            logger.warning("Could not clear the stored session id: %s", exc)

    def _start_playback(self, reply: CommandReply) -> None:
        self._set_state(ControllerState.PLAYING)
        task = asyncio.create_task(self._player.play(reply.audio, reply.media_type))
        self._playback = task
        task.add_done_callback(self._on_playback_done)

    def _on_playback_done(self, task: asyncio.Task[None]) -> None:
        if task is not self._playback:
            return
        self._playback = None
        exc = None if task.cancelled() else task.exception()
        if isinstance(exc, Exception):
            self._fail(exc)
            return
        if self._state is ControllerState.PLAYING:
            self._set_state(ControllerState.IDLE)

    async def interrupt(self) -> None:
        """Stop playback immediately and return to idle."""

        if self._state is not ControllerState.PLAYING:
            return
        task, self._playback = self._playback, None
        await self._player.stop()
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._set_state(ControllerState.IDLE)

    async def wait_for_playback(self) -> None:
        task = self._playback
        if task is not None:
            await asyncio.wait({task})

    def forget_session(self) -> None:
        self._sessions.clear()


__all__ = ["ClientController", "ControllerState"]
