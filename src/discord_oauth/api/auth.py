from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from discord_oauth.api.dependencies import (
    get_app_settings,
    get_scopes,
    get_token_exchanger,
    get_url_builder,
)
from discord_oauth.clients import AuthorizationURLBuilder, Err, ProviderError, Scope
from discord_oauth.clients.types import TokenExchangeClient
from discord_oauth.security import generate_state, states_match
from discord_oauth.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

BASE_DIR = Path(__file__).resolve().parents[1]
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

STATE_KEY = "oauth_state"


@router.get("/")
async def authorize(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    builder: AuthorizationURLBuilder = Depends(get_url_builder),
    scopes: frozenset[Scope] = Depends(get_scopes),
):
    state = None
    if settings.oauth.require_state:
        state = generate_state()
        request.session[STATE_KEY] = state
    return RedirectResponse(url=builder.url_for(scopes, state))


@router.get("/callback", response_class=HTMLResponse)
async def callback(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    exchanger: TokenExchangeClient = Depends(get_token_exchanger),
):
    params = request.query_params
    # A state is good for one callback, whatever the outcome
    expected_state = request.session.pop(STATE_KEY, None)

    # Authorization denied or failed on the provider side
    if "error" in params:
        return _render(
            request,
            status_code=400,
            error={
                "error": params.get("error"),
                "error_description": params.get("error_description"),
            },
        )

    if settings.oauth.require_state and not states_match(expected_state, params.get("state")):
        raise HTTPException(status_code=400, detail="Invalid state")

    code = params.get("code")
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    result = await exchanger.exchange_code(code)
    if isinstance(result, Err):
        error = result.error
        logger.warning(
            "token exchange failed: %s",
            error.kind,
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "error_kind": error.kind,
                "status_code": getattr(error, "status_code", None),
            },
        )
        status_code = 400 if isinstance(error, ProviderError) else 502
        return _render(request, status_code=status_code, error=error.to_dict())

    return _render(request, token=result.value)


def _render(request: Request, *, status_code: int = 200, token=None, error=None):
    return templates.TemplateResponse(
        request,
        "callback.html",
        {"token": token, "error": error},
        status_code=status_code,
    )
