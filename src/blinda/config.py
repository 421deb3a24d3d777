"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Language model (OpenRouter)
    openrouter_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "openrouter_api_key"),
    )
    openrouter_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://openrouter.ai/api/v1"),
        validation_alias=AliasChoices("OPENROUTER_BASE_URL", "openrouter_base_url"),
    )
    openrouter_app_url: Optional[AnyHttpUrl] = Field(
        default=None,
        validation_alias=AliasChoices(
            "OPENROUTER_APP_URL",
            "openrouter_app_url",
            "HTTP_REFERER",
            "http_referer",
            "REFERER",
        ),
    )
    openrouter_app_name: Optional[str] = Field(
        default="Blinda",
        validation_alias=AliasChoices(
            "OPENROUTER_APP_TITLE",
            "openrouter_app_name",
            "X_TITLE",
            "x_title",
        ),
    )
    default_model: str = Field(
        default="openai/gpt-4o-mini",
        validation_alias=AliasChoices(
            "OPENROUTER_DEFAULT_MODEL",
            "default_model",
        ),
    )
    request_timeout: float = Field(
        default=60.0,
        validation_alias=AliasChoices("OPENROUTER_TIMEOUT", "request_timeout"),
        ge=1,
    )

    # Speech (ElevenLabs)
    elevenlabs_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("ELEVENLABS_API_KEY", "elevenlabs_api_key"),
    )
    elevenlabs_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://api.elevenlabs.io/v1"),
        validation_alias=AliasChoices("ELEVENLABS_BASE_URL", "elevenlabs_base_url"),
    )
    stt_model: str = Field(
        default="scribe_v1",
        validation_alias=AliasChoices("STT_MODEL", "stt_model"),
    )
    stt_language_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("STT_LANGUAGE_CODE", "stt_language_code"),
        description="Leave unset to let the provider detect the language.",
    )
    stt_tag_audio_events: bool = Field(
        default=False,
        validation_alias=AliasChoices("STT_TAG_AUDIO_EVENTS", "stt_tag_audio_events"),
    )
    stt_timeout: float = Field(
        default=60.0,
        validation_alias=AliasChoices("STT_TIMEOUT", "stt_timeout"),
        ge=1,
    )
    tts_voice_id: str = Field(
        default="EXAVITQu4vr4xnSDxMaL",  # "Sarah"
        validation_alias=AliasChoices("TTS_VOICE_ID", "tts_voice_id"),
    )
    tts_model_id: str = Field(
        default="eleven_multilingual_v2",
        validation_alias=AliasChoices("TTS_MODEL_ID", "tts_model_id"),
    )
    tts_output_format: str = Field(
        default="mp3_44100_128",
        validation_alias=AliasChoices("TTS_OUTPUT_FORMAT", "tts_output_format"),
    )
    tts_timeout: float = Field(
        default=30.0,
        validation_alias=AliasChoices("TTS_TIMEOUT", "tts_timeout"),
        ge=1,
    )

    # Browser automation (Hyperbrowser)
    hyperbrowser_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("HYPERBROWSER_API_KEY", "hyperbrowser_api_key"),
    )
    hyperbrowser_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://app.hyperbrowser.ai/api"),
        validation_alias=AliasChoices("HYPERBROWSER_BASE_URL", "hyperbrowser_base_url"),
    )
    browser_timeout: float = Field(
        default=300.0,
        validation_alias=AliasChoices("BROWSER_TIMEOUT", "browser_timeout"),
        ge=1,
    )
    browser_poll_interval: float = Field(
        default=2.0,
        validation_alias=AliasChoices(
            "BROWSER_POLL_INTERVAL",
            "browser_poll_interval",
        ),
        gt=0,
    )

    logging_settings_path: Path = Field(
        default_factory=lambda: Path("logging_settings.conf"),
        validation_alias=AliasChoices(
            "LOGGING_SETTINGS_PATH",
            "logging_settings_path",
        ),
    )
    log_dir: Path = Field(
        default_factory=lambda: Path("logs/app"),
        validation_alias=AliasChoices("LOG_DIR", "log_dir"),
    )

    def missing_credentials(self) -> list[str]:
        """Return the environment names of provider keys that are not set."""

        required = {
            "ELEVENLABS_API_KEY": self.elevenlabs_api_key,
            "HYPERBROWSER_API_KEY": self.hyperbrowser_api_key,
            "OPENROUTER_API_KEY": self.openrouter_api_key,
        }
        return [
            name
            for name, secret in required.items()
            if secret is None or not secret.get_secret_value()
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["PROJECT_ROOT", "Settings", "get_settings"]
