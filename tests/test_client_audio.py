import io
import wave

import pytest

from blinda.client.audio import MicrophoneRecorder, RecorderError, encode_wav


def test_encode_wav_header() -> None:
    pcm = b"\x01\x00\x02\x00" * 100

    data = encode_wav(pcm, 16_000, 1)

    with wave.open(io.BytesIO(data), "rb") as wav_file:
        assert wav_file.getnchannels() == 1
        assert wav_file.getsampwidth() == 2
        assert wav_file.getframerate() == 16_000
        assert wav_file.readframes(wav_file.getnframes()) == pcm


def test_stop_without_start_raises() -> None:
    recorder = MicrophoneRecorder()

    assert not recorder.recording
    with pytest.raises(RecorderError):
        recorder.stop()
