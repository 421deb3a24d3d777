"""Microphone capture and interruptible playback."""

from __future__ import annotations

import asyncio
import io
import logging
import threading
import wave
from typing import Sequence

import numpy as np

log = logging.getLogger(__name__)

_DTYPE = "int16"
DEFAULT_PLAYER_COMMAND = ("ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", "-i", "-")


class RecorderError(Exception):
    """Raised when the microphone cannot be opened or was never started."""


def encode_wav(pcm: bytes, sample_rate: int, channels: int = 1) -> bytes:
    """Wrap raw 16-bit PCM in a WAV container."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


class MicrophoneRecorder:
    """Collect microphone frames between start() and stop().

    The PortAudio callback runs on its own thread; frames are appended under a
    lock and joined once recording stops.
    """

    def __init__(
        self,
        sample_rate: int = 16_000,
        channels: int = 1,
        device: int | str | None = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._channels = channels
        self._device = device
        self._frames: list[np.ndarray] = []
        self._lock = threading.Lock()
        self._stream = None

    @property
    def recording(self) -> bool:
        return self._stream is not None

    def _callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            log.warning("portaudio status: %s", status)
        with self._lock:
            self._frames.append(indata.copy())

    def start(self) -> None:
        import sounddevice as sd

        with self._lock:
            self._frames = []
        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype=_DTYPE,
                device=self._device,
                callback=self._callback,
            )
            stream.start()
        except Exception as exc:
            raise RecorderError(f"cannot open microphone: {exc}") from exc
        self._stream = stream
        log.info("Recording started (%d Hz, %d ch)", self._sample_rate, self._channels)

    def stop(self) -> bytes:
        """Stop capturing and return the take as WAV bytes."""

        stream = self._stream
        if stream is None:
            raise RecorderError("recording was not started")
        self._stream = None
        try:
            stream.stop()
        finally:
            stream.close()

        with self._lock:
            frames, self._frames = self._frames, []
        if frames:
            pcm = np.concatenate(frames).astype(np.int16).tobytes()
        else:
            pcm = b""
        log.info("Recording stopped: %d bytes of PCM", len(pcm))
        return encode_wav(pcm, self._sample_rate, self._channels)


class SubprocessPlayer:
    """Play encoded audio by piping it into an external player process."""

    def __init__(self, command: Sequence[str] = DEFAULT_PLAYER_COMMAND) -> None:
        self._command = tuple(command)
        self._process: asyncio.subprocess.Process | None = None

    async def play(self, audio: bytes, media_type: str = "audio/mpeg") -> None:
        log.debug("Playing %d bytes of %s", len(audio), media_type)
        proc = await asyncio.create_subprocess_exec(
            *self._command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        self._process = proc
        try:
            assert proc.stdin is not None
            try:
                proc.stdin.write(audio)
                await proc.stdin.drain()
                proc.stdin.close()
            except (BrokenPipeError, ConnectionResetError):
                # player was stopped while we were still feeding it
                log.debug("Player closed its input early")
            await proc.wait()
        except asyncio.CancelledError:
            await self.stop()
            raise
        finally:
            if self._process is proc:
                self._process = None

    async def stop(self) -> None:
        proc = self._process
        if proc is None or proc.returncode is not None:
            return
        proc.terminate()
        try:
            await asyncio.wait_for(proc.wait(), timeout=1.0)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()


__all__ = [
    "DEFAULT_PLAYER_COMMAND",
    "MicrophoneRecorder",
    "RecorderError",
    "SubprocessPlayer",
    "encode_wav",
]
