from typing import FrozenSet

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError


DEFAULT_PORT = 8888
DEFAULT_SCOPE = "user-read-currently-playing"
DEFAULT_ACCOUNTS_URL = "https://accounts.spotify.com"
DEFAULT_HTTP_TIMEOUT = 10.0


class ConfigError(RuntimeError):
    """Raised at startup when the environment cannot produce valid settings."""


class Settings(BaseSettings):
    """Relay settings from environment variables, read once at startup."""

    client_id: str = Field(alias="SPOTIFY_CLIENT_ID")
    client_secret: str = Field(alias="SPOTIFY_CLIENT_SECRET")
    redirect_uri: str = Field(alias="REDIRECT_URI")
    """Callback URL registered with Spotify"""

    frontend_uri: str = Field(alias="FRONTEND_URI")
    scope: str = Field(DEFAULT_SCOPE, alias="SCOPE")
    port: int = Field(DEFAULT_PORT, alias="PORT", gt=0, lt=65536)
    allowed_origins: FrozenSet[str] = Field(default_factory=frozenset, alias="ORIGINS")
    """JSON array of origins allowed to make cross-origin requests"""

    accounts_url: str = Field(DEFAULT_ACCOUNTS_URL, alias="SPOTIFY_ACCOUNTS_URL")
    http_timeout: float = Field(DEFAULT_HTTP_TIMEOUT, alias="SPOTIFY_HTTP_TIMEOUT", gt=0)

    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("allowed_origins", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: FrozenSet[str]) -> FrozenSet[str]:
        return frozenset(origin.rstrip("/") for origin in value)

    @property
    def authorize_url(self) -> str:
        return f"{self.accounts_url.rstrip('/')}/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.accounts_url.rstrip('/')}/api/token"


def load_settings() -> Settings:
    """Build the relay settings from the process environment.

    Raises:
        ConfigError: A required variable is missing or a value does not validate.
    """
    try:
        return Settings()
    except SettingsError as exc:
        # ORIGINS is the only field decoded as JSON before validation.
        raise ConfigError(f"ORIGINS must be a JSON array of strings: {exc}") from exc
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
