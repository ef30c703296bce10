from __future__ import annotations

from fastapi import Request

from discord_oauth.clients import AuthorizationURLBuilder, Scope
from discord_oauth.clients.types import TokenExchangeClient
from discord_oauth.settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_url_builder(request: Request) -> AuthorizationURLBuilder:
    return request.app.state.url_builder


def get_token_exchanger(request: Request) -> TokenExchangeClient:
    return request.app.state.token_exchanger


def get_scopes(request: Request) -> frozenset[Scope]:
    return request.app.state.scopes
