import pytest
from pydantic import SecretStr

from blinda.config import Settings


def test_environment_aliases(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_DEFAULT_MODEL", "anthropic/claude-3.5-haiku")
    monkeypatch.setenv("BROWSER_TIMEOUT", "120")
    monkeypatch.setenv("TTS_VOICE_ID", "21m00Tcm4TlvDq8ikWAM")

    settings = Settings(_env_file=None)

    assert settings.default_model == "anthropic/claude-3.5-haiku"
    assert settings.browser_timeout == 120
    assert settings.tts_voice_id == "21m00Tcm4TlvDq8ikWAM"


def test_missing_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ELEVENLABS_API_KEY", "HYPERBROWSER_API_KEY", "OPENROUTER_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None, elevenlabs_api_key=SecretStr("el-key"))

    assert settings.missing_credentials() == [
        "HYPERBROWSER_API_KEY",
        "OPENROUTER_API_KEY",
    ]


def test_blank_credential_counts_as_missing(settings: Settings) -> None:
    blank = settings.model_copy(update={"openrouter_api_key": SecretStr("")})

    assert blank.missing_credentials() == ["OPENROUTER_API_KEY"]
    assert settings.missing_credentials() == []
