from discord_oauth.clients.authorize import (
    AuthorizationURLBuilder,
    authorization_code_grant_url,
    bot_authorization_url,
)
from discord_oauth.clients.errors import (
    ConfigurationError,
    DecodeFailure,
    HttpStatusError,
    NetworkFailure,
    OAuthError,
    ProviderError,
    TlsFailure,
)
from discord_oauth.clients.result import Err, Ok, Result
from discord_oauth.clients.token import ExchangeResult, TokenExchanger
from discord_oauth.clients.types import (
    AccessTokenExchangeRequest,
    AccessTokenResponse,
    AuthorizationRequestParams,
    ClientCredentials,
    OAuthConfig,
    Scope,
)

__all__ = [
    "AccessTokenExchangeRequest",
    "AccessTokenResponse",
    "AuthorizationRequestParams",
    "AuthorizationURLBuilder",
    "ClientCredentials",
    "ConfigurationError",
    "DecodeFailure",
    "Err",
    "ExchangeResult",
    "HttpStatusError",
    "NetworkFailure",
    "OAuthConfig",
    "OAuthError",
    "Ok",
    "ProviderError",
    "Result",
    "Scope",
    "TlsFailure",
    "TokenExchanger",
    "authorization_code_grant_url",
    "bot_authorization_url",
]
