"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with RELAY_ prefix,
plus a local .env file when one exists. The two names the relay has
always honoured keep working: OPENAI_API_KEY for the credential and
PORT for the listen port.

Learn: Settings is the glue layer's view (everything the process needs
to start). ProxyConfig is the relay core's view — just the credential
and the endpoint, frozen, validated once at startup.
"""

from dataclasses import dataclass

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_UPSTREAM_URL = (
    "wss://api.openai.com/v1/realtime?model=gpt-4o-realtime-preview-2024-10-01"
)


class Settings(BaseSettings):
    """All app configuration. Set via RELAY_* env vars."""

    # Upstream
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("RELAY_API_KEY", "OPENAI_API_KEY"),
    )
    upstream_url: str = DEFAULT_UPSTREAM_URL
    open_timeout: float = 10.0  # upstream handshake
    close_timeout: float = 10.0  # upstream closing handshake

    # Session teardown
    drain_timeout: float = 5.0  # grace for the second pump after the first stops

    # Server
    host: str = "0.0.0.0"
    port: int = Field(
        default=8000,
        validation_alias=AliasChoices("RELAY_PORT", "PORT"),
    )

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = {
        "env_prefix": "RELAY_",
        "env_file": ".env",
        "extra": "ignore",
        "populate_by_name": True,
    }


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable relay configuration: whose key, which endpoint."""

    credential: str
    upstream_endpoint: str

    def __post_init__(self):
        if not self.credential:
            raise ValueError(
                "No API key configured. Set RELAY_API_KEY or OPENAI_API_KEY."
            )
        if not self.upstream_endpoint:
            raise ValueError("No upstream endpoint configured. Set RELAY_UPSTREAM_URL.")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProxyConfig":
        return cls(credential=settings.api_key, upstream_endpoint=settings.upstream_url)

    def __repr__(self) -> str:
        # Never let the credential reach a log line
        return f"ProxyConfig(credential='***', upstream_endpoint={self.upstream_endpoint!r})"


# Singleton — import this everywhere
settings = Settings()
