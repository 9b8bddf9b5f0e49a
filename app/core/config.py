"""Application configuration settings.

This module defines the gateway settings using Pydantic's BaseSettings.
Values are loaded from environment variables and an optional .env file,
validated once at startup and then treated as read-only for the lifetime
of the process.
"""

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings

from app.core.exceptions import ConfigurationError

# Gemini exposes an OpenAI-compatible surface, so the AsyncOpenAI client can talk to it directly.
DEFAULT_LLM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

# Mandatory secrets and the environment variable that provides each one
REQUIRED_SECRETS: dict[str, str] = {
    "gemini_api_key": "GEMINI_API_KEY",
    "internal_api_key": "INTERNAL_API_KEY",
}


class Settings(BaseSettings):
    """Manages gateway settings, loading them from environment variables or an .env file.

    Attributes:
        gemini_api_key: Credential for the generation provider.
        internal_api_key: Shared secret expected in the x-internal-api-key header.
        cors_origin: Allowed cross-origin value, comma-separated for several; "*" allows every origin.
        host: Interface uvicorn binds to.
        port: Listening port.
        model_id: Identifier of the generation model.
        llm_base_url: Base URL of the provider's OpenAI-compatible API.
        LLM_CONNECT_TIMEOUT: LLM client connect timeout in seconds.
        LLM_READ_TIMEOUT: LLM client read timeout in seconds.
        generation_timeout: Upper bound, in seconds, for draining one generation stream.
        disconnect_poll_interval: Seconds between client-disconnect checks while streaming.
        max_body_bytes: Largest accepted request body.
    """

    gemini_api_key: str | None = Field(default=None)
    internal_api_key: str | None = Field(default=None)

    cors_origin: str = Field(default="*")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)

    model_id: str = Field(default="gemini-2.5-flash-lite")
    llm_base_url: str = Field(default=DEFAULT_LLM_BASE_URL)

    LLM_CONNECT_TIMEOUT: float = Field(default=10.0, description="LLM client connect timeout in seconds.")
    LLM_READ_TIMEOUT: float = Field(default=180.0, description="LLM client read timeout in seconds.")

    generation_timeout: float = Field(default=120.0, gt=0)
    disconnect_poll_interval: float = Field(default=0.5, gt=0)
    max_body_bytes: int = Field(default=1024 * 1024, gt=0)

    model_config = {
        "env_file": ".env",
        "protected_namespaces": ("settings_",),
        "env_prefix": "",  # No prefix for environment variables
        "extra": "ignore",  # Ignore extra fields
        "frozen": True,
    }

    @field_validator("cors_origin", mode="before")  # type: ignore
    @classmethod
    def default_cors_origin(cls, v: str | None) -> str:
        """Falls back to allowing every origin when the value is empty."""
        if isinstance(v, str) and v.strip():
            return v.strip()
        return "*"

    @property
    def cors_allowed_origins(self) -> list[str]:
        """The configured origin value split on commas."""
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    def require_secrets(self) -> None:
        """Raises ConfigurationError naming the first mandatory secret that is not set."""
        for attr, env_name in REQUIRED_SECRETS.items():
            if not getattr(self, attr):
                raise ConfigurationError(f"Falta {env_name}. Define la variable de entorno o el archivo .env")
