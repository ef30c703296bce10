from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from discord_oauth.api import auth_router, system_router
from discord_oauth.app.exceptions import register_exception_handlers
from discord_oauth.app.logging_config import configure_logging
from discord_oauth.app.metrics import instrument_metrics
from discord_oauth.clients import AuthorizationURLBuilder, TokenExchanger
from discord_oauth.middleware.request_id import RequestIDMiddleware
from discord_oauth.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        ConfigurationError: client credentials or scopes are missing or invalid
    """
    settings = settings or get_settings()
    configure_logging(settings.logging.as_json, settings.server.log_level)

    # Fail at startup rather than on the first callback
    config = settings.oauth.to_config()
    scopes = settings.oauth.scope_set()
    if not settings.oauth.secret_key:
        logger.warning(
            "No session secret configured; using a per-process random key. "
            "Set DISCORD_OAUTH__SECRET_KEY when running several workers."
        )

    app = FastAPI(
        title=settings.app_name,
        description="Discord OAuth2 authorization code grant",
        version=settings.app_version,
        debug=settings.server.debug,
    )
    app.state.settings = settings
    app.state.oauth_config = config
    app.state.scopes = scopes
    app.state.url_builder = AuthorizationURLBuilder(config)
    app.state.token_exchanger = TokenExchanger(config, timeout=settings.oauth.timeout)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.oauth.session_secret(),
        session_cookie=settings.oauth.session_cookie_name,
        same_site="lax",
        https_only=settings.oauth.session_https_only,
    )

    app.include_router(system_router)
    app.include_router(auth_router)

    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    instrument_metrics(app)

    return app
