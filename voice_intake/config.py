# voice_intake/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


MAX_AUDIO_BYTES = 25 * 1024 * 1024


class Settings(BaseSettings):
    openai_api_key: str | None = Field(None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str | None = Field(None, validation_alias="OPENAI_BASE_URL")
    llm_model: str = Field("gpt-3.5-turbo", validation_alias="LLM_MODEL")

    transcription_model: str = Field("whisper-1", validation_alias="TRANSCRIPTION_MODEL")
    transcription_language: str = Field("ja", validation_alias="TRANSCRIPTION_LANGUAGE")
    transcription_temperature: float = Field(0.2, validation_alias="TRANSCRIPTION_TEMPERATURE")

    completion_temperature: float = Field(0.3, validation_alias="COMPLETION_TEMPERATURE")
    summary_max_tokens: int = Field(400, validation_alias="SUMMARY_MAX_TOKENS")
    diagnosis_max_tokens: int = Field(600, validation_alias="DIAGNOSIS_MAX_TOKENS")

    max_audio_bytes: int = Field(MAX_AUDIO_BYTES, validation_alias="MAX_AUDIO_BYTES")

    auth_realm: str = Field("Medical Voice System", validation_alias="AUTH_REALM")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    host: str = Field("127.0.0.1", validation_alias="HOST")
    port: int = Field(8000, validation_alias="PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
