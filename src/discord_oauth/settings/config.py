from __future__ import annotations

import secrets
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as pkg_version
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from discord_oauth.clients.errors import ConfigurationError
from discord_oauth.clients.types import (
    DISCORD_AUTHORIZE_URL,
    DISCORD_TOKEN_URL,
    ClientCredentials,
    OAuthConfig,
    Scope,
)


def _package_version(default: str = "0.1.0") -> str:
    try:
        return pkg_version("discord-oauth")
    except PackageNotFoundError:
        return default


_PROCESS_SESSION_SECRET = secrets.token_urlsafe(32)


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    reload: bool = False
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"


class OAuthSettings(BaseModel):
    # Discord application credentials
    client_id: Optional[int] = None
    client_secret: Optional[str] = None

    # Must match a redirect registered on the Discord application
    redirect_uri: str = "http://localhost:8000/callback"
    scopes: str = "identify"  # space- or comma-separated

    authorize_url: str = DISCORD_AUTHORIZE_URL
    token_url: str = DISCORD_TOKEN_URL
    timeout: float = 10.0

    # CSRF protection for the browser round trip
    require_state: bool = True
    secret_key: Optional[str] = None  # random per process when unset
    session_cookie_name: str = "discord_oauth_session"
    session_https_only: bool = False

    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None

    def session_secret(self) -> str:
        return self.secret_key or _PROCESS_SESSION_SECRET

    def scope_set(self) -> frozenset[Scope]:
        try:
            scopes = Scope.parse_many(self.scopes)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown OAuth scope in configuration: {exc}") from exc
        if not scopes:
            raise ConfigurationError("At least one OAuth scope must be configured")
        return scopes

    def to_config(self) -> OAuthConfig:
        if self.client_id is None:
            raise ConfigurationError("No client id configured; set DISCORD_OAUTH__CLIENT_ID")
        if not self.client_secret:
            raise ConfigurationError("No client secret configured; set DISCORD_OAUTH__CLIENT_SECRET")
        try:
            credentials = ClientCredentials(self.client_id, self.client_secret)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        return OAuthConfig(
            credentials=credentials,
            redirect_uri=self.redirect_uri,
            authorize_url=self.authorize_url,
            token_url=self.token_url,
        )


class LoggingSettings(BaseModel):
    as_json: bool = False


class Settings(BaseSettings):
    """Application settings loaded from environment (and .env)."""

    app_name: str = "Discord OAuth"
    app_version: str = Field(default_factory=_package_version)

    server: ServerSettings = ServerSettings()
    oauth: OAuthSettings = OAuthSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_prefix="DISCORD_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
