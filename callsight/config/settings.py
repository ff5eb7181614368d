from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Raised when a required credential or setting is missing."""


class OpenAIConfig(BaseSettings):
    """Credentials and transport options shared by both upstream services."""

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias="OPENAI_BASE_URL",
    )
    connect_retries: int = Field(
        default=1,
        validation_alias="OPENAI_CONNECT_RETRIES",
        ge=0,
        le=5,
        description="Retries for failed connection attempts only; HTTP errors are never retried.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )

    def require_api_key(self) -> str:
        """Return the API key or fail with a configuration error."""

        if self.api_key is None or not self.api_key.get_secret_value().strip():
            raise ConfigurationError("OpenAI API key not configured")
        return self.api_key.get_secret_value().strip()


class TranscriptionConfig(BaseSettings):
    """Speech-to-text service configuration."""

    model: str = "whisper-1"
    response_format: str = "verbose_json"
    timeout_seconds: float = Field(default=120.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="TRANSCRIPTION_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class AnalysisConfig(BaseSettings):
    """Chat-completion model configuration for the call analysis."""

    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1, le=16384)
    timeout_seconds: float = Field(default=90.0, gt=0)
    fallback_transcript_chars: int = Field(
        default=500,
        ge=1,
        description="Length of the raw transcript prefix kept in a fallback analysis.",
    )

    model_config = SettingsConfigDict(
        env_prefix="ANALYSIS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Callsight Call Analysis API"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/analysis_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Upstream services
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["POST", "OPTIONS"]
    cors_allow_headers: list[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
