from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlparse, urlunparse

from discord_oauth.clients.types import (
    DISCORD_AUTHORIZE_URL,
    AuthorizationRequestParams,
    OAuthConfig,
    Scope,
    serialize_scopes,
)


def authorization_code_grant_url(
    client_id: int,
    scopes: Iterable[Scope],
    state: Optional[str],
    redirect_uri: str,
    *,
    authorize_url: str = DISCORD_AUTHORIZE_URL,
) -> str:
    """Build the URL that starts an authorization code grant.

    Scopes are serialized in canonical order, so equal scope sets always yield
    byte-identical URLs. ``state`` is only emitted when given.
    """
    params = AuthorizationRequestParams(
        client_id=client_id,
        scopes=frozenset(scopes),
        redirect_uri=redirect_uri,
        state=state,
    )
    return _append_query(authorize_url, params.to_query())


def bot_authorization_url(
    client_id: int,
    permissions: int,
    scopes: Iterable[Scope] = (Scope.BOT,),
    *,
    guild_id: Optional[int] = None,
    disable_guild_select: bool = False,
    redirect_uri: Optional[str] = None,
    authorize_url: str = DISCORD_AUTHORIZE_URL,
) -> str:
    """Build a bot invite URL; ``bot`` is always part of the requested scopes."""
    if permissions < 0:
        raise ValueError("permissions must be a non-negative bitfield")
    params: dict[str, Any] = {
        "client_id": client_id,
        "scope": serialize_scopes({Scope.BOT, *scopes}),
        "permissions": permissions,
        "guild_id": guild_id,
        "disable_guild_select": "true" if disable_guild_select else None,
    }
    if redirect_uri is not None:
        params["response_type"] = "code"
        params["redirect_uri"] = redirect_uri
    return _append_query(authorize_url, params)


class AuthorizationURLBuilder:
    """Authorization URL builder bound to one client configuration."""

    def __init__(self, config: OAuthConfig) -> None:
        self._config = config

    def build(
        self,
        client_id: int,
        scopes: Iterable[Scope],
        state: Optional[str],
        redirect_uri: str,
    ) -> str:
        return authorization_code_grant_url(
            client_id,
            scopes,
            state,
            redirect_uri,
            authorize_url=self._config.authorize_url,
        )

    def url_for(self, scopes: Iterable[Scope], state: Optional[str] = None) -> str:
        return self.build(self._config.client_id, scopes, state, self._config.redirect_uri)


def _append_query(url: str, params: Mapping[str, Any]) -> str:
    parsed = urlparse(url)
    query_params = parse_qsl(parsed.query, keep_blank_values=True)
    query_params.extend((str(k), str(v)) for k, v in params.items() if v is not None)
    # quote (not quote_plus): spaces in the scope list must become %20
    new_query = urlencode(query_params, quote_via=quote)
    return urlunparse(parsed._replace(query=new_query))
