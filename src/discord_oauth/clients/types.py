from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from discord_oauth.clients.token import ExchangeResult

DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"

_MAX_CLIENT_ID = 2**64 - 1


class Scope(str, Enum):
    """Discord OAuth2 scopes, declared in canonical serialization order."""

    ACTIVITIES_READ = "activities.read"
    ACTIVITIES_WRITE = "activities.write"
    APPLICATIONS_BUILDS_READ = "applications.builds.read"
    APPLICATIONS_BUILDS_UPLOAD = "applications.builds.upload"
    APPLICATIONS_COMMANDS = "applications.commands"
    APPLICATIONS_COMMANDS_UPDATE = "applications.commands.update"
    APPLICATIONS_COMMANDS_PERMISSIONS_UPDATE = "applications.commands.permissions.update"
    APPLICATIONS_ENTITLEMENTS = "applications.entitlements"
    APPLICATIONS_STORE_UPDATE = "applications.store.update"
    BOT = "bot"
    CONNECTIONS = "connections"
    DM_CHANNELS_MESSAGES_READ = "dm_channels.messages.read"
    DM_CHANNELS_READ = "dm_channels.read"
    EMAIL = "email"
    GDM_JOIN = "gdm.join"
    GUILDS = "guilds"
    GUILDS_JOIN = "guilds.join"
    GUILDS_MEMBERS_READ = "guilds.members.read"
    IDENTIFY = "identify"
    MESSAGES_READ = "messages.read"
    OPENID = "openid"
    PRESENCES_READ = "presences.read"
    PRESENCES_WRITE = "presences.write"
    RELATIONSHIPS_READ = "relationships.read"
    ROLE_CONNECTIONS_WRITE = "role_connections.write"
    RPC = "rpc"
    RPC_ACTIVITIES_WRITE = "rpc.activities.write"
    RPC_NOTIFICATIONS_READ = "rpc.notifications.read"
    RPC_VOICE_READ = "rpc.voice.read"
    RPC_VOICE_WRITE = "rpc.voice.write"
    VOICE = "voice"
    WEBHOOK_INCOMING = "webhook.incoming"

    @classmethod
    def parse_many(cls, value: str) -> FrozenSet["Scope"]:
        """Parse a space- or comma-separated list of scope names."""
        names = value.replace(",", " ").split()
        return frozenset(cls(name) for name in names)


_SCOPE_RANK: Dict[Scope, int] = {scope: rank for rank, scope in enumerate(Scope)}
_SCOPE_VALUES = frozenset(scope.value for scope in Scope)


def canonical_scopes(scopes: Iterable[Scope]) -> list[Scope]:
    return sorted(set(scopes), key=_SCOPE_RANK.__getitem__)


def serialize_scopes(scopes: Iterable[Scope]) -> str:
    return " ".join(scope.value for scope in canonical_scopes(scopes))


@dataclass(frozen=True)
class ClientCredentials:
    client_id: int
    client_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.client_id, bool) or not isinstance(self.client_id, int):
            raise TypeError("client_id must be an integer")
        if not 0 <= self.client_id <= _MAX_CLIENT_ID:
            raise ValueError("client_id must fit in an unsigned 64-bit integer")


@dataclass(frozen=True)
class OAuthConfig:
    """Client configuration shared by the URL builder and the token exchanger.

    Loaded once at startup and never mutated. Holding ``redirect_uri`` here keeps
    the authorization request and the code exchange on the same value.
    """

    credentials: ClientCredentials
    redirect_uri: str
    authorize_url: str = DISCORD_AUTHORIZE_URL
    token_url: str = DISCORD_TOKEN_URL

    @property
    def client_id(self) -> int:
        return self.credentials.client_id


@dataclass(frozen=True)
class AuthorizationRequestParams:
    client_id: int
    scopes: FrozenSet[Scope]
    redirect_uri: str
    state: Optional[str] = None

    def to_query(self) -> Dict[str, str]:
        params = {
            "response_type": "code",
            "client_id": str(self.client_id),
            "scope": serialize_scopes(self.scopes),
            "redirect_uri": self.redirect_uri,
        }
        if self.state is not None:
            params["state"] = self.state
        return params


@dataclass(frozen=True)
class AccessTokenExchangeRequest:
    client_id: int
    client_secret: str = field(repr=False)
    code: str = field(repr=False)
    redirect_uri: str

    @classmethod
    def from_config(cls, config: OAuthConfig, code: str) -> "AccessTokenExchangeRequest":
        return cls(
            client_id=config.credentials.client_id,
            client_secret=config.credentials.client_secret,
            code=code,
            redirect_uri=config.redirect_uri,
        )

    def to_form(self) -> Dict[str, str]:
        return {
            "client_id": str(self.client_id),
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "code": self.code,
            "redirect_uri": self.redirect_uri,
        }


class AccessTokenResponse(BaseModel):
    """Successful token endpoint payload.

    Only ``access_token`` is guaranteed; the remaining fields depend on what the
    provider chose to send back.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    scope: FrozenSet[Scope] = frozenset()
    expires_in: Optional[timedelta] = None
    refresh_token: Optional[str] = None

    @field_validator("scope", mode="before")
    @classmethod
    def _split_scope(cls, value):
        # Discord returns granted scopes as one space-delimited string
        if isinstance(value, str):
            value = value.split()
        if isinstance(value, (list, tuple, set, frozenset)):
            # Unknown scope names are dropped, not fatal; non-strings still fail validation
            return [
                name
                for name in value
                if isinstance(name, Scope) or not isinstance(name, str) or name in _SCOPE_VALUES
            ]
        return value


class TokenExchangeClient(Protocol):
    async def exchange(self, request: AccessTokenExchangeRequest) -> ExchangeResult:
        ...

    async def exchange_code(self, code: str) -> ExchangeResult:
        ...
